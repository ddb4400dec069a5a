"""TOML configuration loader for the pantry tracker."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class GoogleVisionConfig:
    credentials_path: str = "./google-service-account.json"


@dataclass
class OCRConfig:
    backend: str = "google_vision"
    google_vision: GoogleVisionConfig = field(default_factory=GoogleVisionConfig)


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = "gemini-2.5-flash"


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class ExtractionConfig:
    mode: str = "llm"  # "llm" (delegated) or "local" (line parser)
    llm_backend: str = "gemini"
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)


@dataclass
class AnalysisConfig:
    backend: str = "auto"  # "auto", "pipeline" or "mock"
    mock_seed: int | None = None


@dataclass
class DatabaseConfig:
    path: str = "~/.config/pantry/food_tracker.db"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3002
    allow_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class PantryConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(path: str | Path | None = None) -> PantryConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    Credentials, the database path and the port can be overridden via
    environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    ext = raw.get("extraction", {})
    ana = raw.get("analysis", {})
    dbs = raw.get("database", {})
    srv = raw.get("server", {})

    vision_cfg = ocr.get("google_vision", {})
    gemini_cfg = ext.get("gemini", {})
    claude_cfg = ext.get("claude", {})

    # Resolve secrets: config file → environment variable
    credentials_path = vision_cfg.get("credentials_path", "") or os.environ.get(
        "GOOGLE_APPLICATION_CREDENTIALS", "./google-service-account.json"
    )
    gemini_api_key = (
        gemini_cfg.get("api_key", "")
        or os.environ.get("GOOGLE_GEMINI_API_KEY", "")
        or os.environ.get("GEMINI_API_KEY", "")
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    db_path = os.environ.get("PANTRY_DB_PATH") or dbs.get(
        "path", "~/.config/pantry/food_tracker.db"
    )
    port = int(os.environ.get("PORT") or srv.get("port", 3002))

    return PantryConfig(
        ocr=OCRConfig(
            backend=ocr.get("backend", "google_vision"),
            google_vision=GoogleVisionConfig(credentials_path=credentials_path),
        ),
        extraction=ExtractionConfig(
            mode=ext.get("mode", "llm"),
            llm_backend=ext.get("llm_backend", "gemini"),
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.5-flash"),
            ),
            claude=ClaudeConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        analysis=AnalysisConfig(
            backend=ana.get("backend", "auto"),
            mock_seed=ana.get("mock_seed"),
        ),
        database=DatabaseConfig(path=db_path),
        server=ServerConfig(
            host=srv.get("host", "0.0.0.0"),
            port=port,
            allow_origins=srv.get("allow_origins", ["*"]),
        ),
    )
