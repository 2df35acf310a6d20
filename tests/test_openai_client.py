import pytest

from ai_mentor.utils import config, openai_client


@pytest.fixture(autouse=True)
def _fresh_client_cache():
    openai_client.get_openai_client.cache_clear()
    yield
    openai_client.get_openai_client.cache_clear()


def test_missing_key_raises(monkeypatch):
    monkeypatch.setattr(config.settings, "openai_api_key", "")
    with pytest.raises(ValueError):
        openai_client.get_openai_client()


def test_client_uses_configured_gateway(monkeypatch):
    monkeypatch.setattr(config.settings, "openai_api_key", "k")
    monkeypatch.setattr(config.settings, "openai_base_url", "https://gateway.example/v1/")
    client = openai_client.get_openai_client()
    assert str(client.base_url).startswith("https://gateway.example/v1")
    assert client.max_retries == 0
