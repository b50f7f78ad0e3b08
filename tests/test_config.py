import pytest

from sentiment_table.config import DEFAULT_MODEL, ConfigError, EnrichmentSettings

ENV_KEYS = ["GEMINI_API_KEY", "GEMINI_MODEL", "SENTIMENT_MAX_CONCURRENCY", "SENTIMENT_SUPPRESS_STALE"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = EnrichmentSettings.from_env()
    assert settings.api_key == ""
    assert settings.model == DEFAULT_MODEL
    assert settings.max_concurrency is None
    assert settings.suppress_stale is True
    assert settings.endpoint.endswith("/models/gemini-1.5-flash:generateContent")


def test_values_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "k-1")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
    monkeypatch.setenv("SENTIMENT_MAX_CONCURRENCY", "4")
    monkeypatch.setenv("SENTIMENT_SUPPRESS_STALE", "off")
    settings = EnrichmentSettings.from_env()
    assert settings.api_key == "k-1"
    assert settings.model == "gemini-2.0-flash"
    assert settings.max_concurrency == 4
    assert settings.suppress_stale is False


@pytest.mark.parametrize(
    "key,value",
    [
        ("SENTIMENT_MAX_CONCURRENCY", "many"),
        ("SENTIMENT_MAX_CONCURRENCY", "0"),
        ("SENTIMENT_SUPPRESS_STALE", "maybe"),
    ],
)
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigError):
        EnrichmentSettings.from_env()
