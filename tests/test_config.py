from pathlib import Path

import pytest
from pydantic import ValidationError


def test_valid_config(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "abc123")
    monkeypatch.delenv("DB_PATH", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)

    from importlib import reload
    import config

    reload(config)

    assert config.settings.tmdb_api_key == "abc123"
    assert config.settings.db_path == Path("data/movies.db")
    assert config.settings.log_level == "INFO"
    assert config.settings.request_timeout == 30.0


def test_overrides_from_env(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "abc123")
    monkeypatch.setenv("DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("REQUEST_TIMEOUT", "5")

    from config import Settings

    settings = Settings(_env_file=None)
    assert settings.db_path == Path("/tmp/other.db")
    assert settings.request_timeout == 5.0


def test_missing_required_vars(monkeypatch):
    monkeypatch.delenv("TMDB_API_KEY", raising=False)

    from config import Settings

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
