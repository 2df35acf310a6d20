from ai_mentor.utils.config import Settings


def test_api_key_aliases(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    assert Settings().openai_api_key == "gem-key"


def test_playback_defaults(monkeypatch):
    monkeypatch.delenv("PLAYBACK_MAX_SPEED_MS", raising=False)
    s = Settings()
    assert (s.playback_min_speed_ms, s.playback_max_speed_ms) == (100, 2000)
