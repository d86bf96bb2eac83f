import pytest

from hulk.settings import SERVER_DEFAULTS, Settings


def test_defaults(monkeypatch):
    for name in ("HULK_HOST", "HULK_PORT", "HULK_LOG_LEVEL", "HULK_ANALYZER_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.port == SERVER_DEFAULTS["port"]
    assert settings.analyzer_enabled is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("HULK_PORT", "8080")
    monkeypatch.setenv("HULK_ANALYZER_API_KEY", "sk-test")
    monkeypatch.setenv("HULK_ANALYZER_MODEL", "local-model")
    settings = Settings.from_env()
    assert settings.port == 8080
    assert settings.analyzer_enabled
    assert settings.analyzer_model == "local-model"


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("HULK_PORT", "eighty")
    with pytest.raises(ValueError, match="HULK_PORT"):
        Settings.from_env()
