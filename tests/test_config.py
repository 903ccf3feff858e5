from pathlib import Path

import pytest

from config.config import Config, ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "TAVILY_API_KEY",
        "TAVILY_BASE_URL",
        "TAVILY_TIMEOUT_S",
        "SEARCH_DATA_DIR",
        "SEARCH_STORAGE_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.setattr("config.config.PROJECT_ROOT", Path("/nonexistent-project-root"))
    return monkeypatch


@pytest.mark.unit
def test_defaults(clean_env):
    config = Config()

    assert config.TAVILY_API_KEY == ""
    assert config.TAVILY_BASE_URL == "https://api.tavily.com"
    assert config.TAVILY_TIMEOUT_S == 30.0
    assert config.storage_path.name == "searches.json"


@pytest.mark.unit
def test_missing_api_key_fails_validation(clean_env):
    config = Config()

    assert config.validate() is False
    with pytest.raises(ConfigError):
        config.require_api_key()


@pytest.mark.unit
def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("TAVILY_API_KEY", "  tvly-abc  ")
    clean_env.setenv("TAVILY_TIMEOUT_S", "12.5")
    clean_env.setenv("SEARCH_DATA_DIR", str(tmp_path))
    clean_env.setenv("SEARCH_STORAGE_FILE", "cache.json")

    config = Config()

    assert config.require_api_key() == "tvly-abc"
    assert config.TAVILY_TIMEOUT_S == 12.5
    assert config.storage_path == tmp_path / "cache.json"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_bad_timeout_falls_back_to_default(clean_env, raw):
    clean_env.setenv("TAVILY_TIMEOUT_S", raw)

    assert Config().TAVILY_TIMEOUT_S == 30.0
