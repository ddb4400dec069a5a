import pytest

_ENV_VARS = (
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_GEMINI_API_KEY",
    "GEMINI_API_KEY",
    "ANTHROPIC_API_KEY",
    "PANTRY_DB_PATH",
    "PORT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep credentials from the developer's shell out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
