"""Tests for pantry config loading."""

import os
import tempfile

from pantry.config import (
    AnalysisConfig,
    DatabaseConfig,
    PantryConfig,
    ServerConfig,
    load_config,
)


def test_load_config_defaults():
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, PantryConfig)
    assert config.ocr.backend == "google_vision"
    assert config.ocr.google_vision.credentials_path == "./google-service-account.json"
    assert config.extraction.mode == "llm"
    assert config.extraction.llm_backend == "gemini"
    assert config.extraction.gemini.model == "gemini-2.5-flash"
    assert config.extraction.gemini.api_key == ""
    assert config.analysis.backend == "auto"
    assert config.analysis.mock_seed is None
    assert config.database.path == "~/.config/pantry/food_tracker.db"
    assert config.server.port == 3002
    assert config.server.allow_origins == ["*"]


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.extraction.mode == "llm"


def test_load_config_from_toml():
    """Loading a valid TOML file populates config."""
    toml_content = b"""\
[ocr.google_vision]
credentials_path = "/etc/pantry/sa.json"

[extraction]
mode = "local"
llm_backend = "claude"

[extraction.claude]
api_key = "test-key-123"
model = "claude-haiku"

[analysis]
backend = "mock"
mock_seed = 42

[database]
path = "/var/lib/pantry.db"

[server]
host = "127.0.0.1"
port = 8080
allow_origins = ["http://localhost:5173"]
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)

    assert config.ocr.google_vision.credentials_path == "/etc/pantry/sa.json"
    assert config.extraction.mode == "local"
    assert config.extraction.llm_backend == "claude"
    assert config.extraction.claude.api_key == "test-key-123"
    assert config.extraction.claude.model == "claude-haiku"
    assert config.analysis.backend == "mock"
    assert config.analysis.mock_seed == 42
    assert config.database.path == "/var/lib/pantry.db"
    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8080
    assert config.server.allow_origins == ["http://localhost:5173"]


def test_partial_toml_keeps_other_defaults(tmp_path):
    path = tmp_path / "pantry.toml"
    path.write_text('[extraction]\nmode = "local"\n')
    config = load_config(path)
    assert config.extraction.mode == "local"
    assert config.extraction.llm_backend == "gemini"
    assert config.server.port == 3002


def test_secrets_from_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/run/secrets/vision.json")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-env")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "claude-env")
    config = load_config()
    assert config.ocr.google_vision.credentials_path == "/run/secrets/vision.json"
    assert config.extraction.gemini.api_key == "gemini-env"
    assert config.extraction.claude.api_key == "claude-env"


def test_google_gemini_key_takes_precedence(monkeypatch):
    monkeypatch.setenv("GOOGLE_GEMINI_API_KEY", "primary")
    monkeypatch.setenv("GEMINI_API_KEY", "secondary")
    assert load_config().extraction.gemini.api_key == "primary"


def test_file_secret_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GOOGLE_GEMINI_API_KEY", "from-env")
    path = tmp_path / "pantry.toml"
    path.write_text('[extraction.gemini]\napi_key = "from-file"\n')
    assert load_config(path).extraction.gemini.api_key == "from-file"


def test_db_path_and_port_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "pantry.toml"
    path.write_text('[database]\npath = "/from/file.db"\n\n[server]\nport = 9000\n')
    monkeypatch.setenv("PANTRY_DB_PATH", "/from/env.db")
    monkeypatch.setenv("PORT", "4000")
    config = load_config(path)
    assert config.database.path == "/from/env.db"
    assert config.server.port == 4000


def test_dataclass_defaults():
    assert AnalysisConfig().backend == "auto"
    assert DatabaseConfig().path.endswith("food_tracker.db")
    assert ServerConfig().host == "0.0.0.0"
