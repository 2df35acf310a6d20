"""Application configuration."""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OPENAI_API_KEY", "GEMINI_API_KEY", "API_KEY"),
    )
    # Any OpenAI-compatible endpoint, e.g. Gemini's /v1beta/openai/ gateway.
    openai_base_url: str = ""
    openai_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.2
    llm_timeout_seconds: float = 120.0

    playback_min_speed_ms: int = 100
    playback_max_speed_ms: int = 2000
    playback_default_speed_ms: int = 1000

    # Oldest visualizer sessions are closed once this many are open.
    visualizer_max_sessions: int = 100


settings = Settings()
