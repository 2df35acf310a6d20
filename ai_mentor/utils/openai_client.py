"""Shared OpenAI-compatible client for the content provider."""
from __future__ import annotations

import atexit
from functools import lru_cache

import httpx
from openai import OpenAI

from ai_mentor.utils.config import settings


def _build_httpx_client() -> httpx.Client:
    # Code traces are long generations; reads get the full request budget.
    client = httpx.Client(
        timeout=httpx.Timeout(settings.llm_timeout_seconds, connect=10.0),
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        follow_redirects=True,
    )
    atexit.register(client.close)
    return client


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """Return a process-wide client.

    ``openai_base_url`` points the SDK at any OpenAI-compatible gateway
    (Gemini exposes one), so the provider is not tied to a single vendor.
    """
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is not set")
    client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        max_retries=0,
        http_client=_build_httpx_client(),
    )
    atexit.register(client.close)
    return client
