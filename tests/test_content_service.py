"""Analysis Provider with the OpenAI client replaced by a canned responder."""
from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from ai_mentor.services import content_service
from ai_mentor.services.content_service import AnalysisProviderError, _extract_json
from ai_mentor.utils import config


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _install(monkeypatch, content=None, error=None):
    completions = FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(config.settings, "openai_api_key", "test-key")
    monkeypatch.setattr(content_service, "get_openai_client", lambda: client)
    return completions


def test_analyze_code_builds_prompt_and_validates(monkeypatch, analysis_payload):
    completions = _install(monkeypatch, json.dumps(analysis_payload))
    analysis = content_service.analyze_code("let sum = 0;", "JavaScript", "3")

    assert len(analysis.animation_data.highlight_sequence) == 4
    call = completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    user_prompt = call["messages"][1]["content"]
    assert "Language: JavaScript" in user_prompt
    assert "Input: 3" in user_prompt
    assert "let sum = 0;" in user_prompt


def test_analyze_code_tolerates_prose_around_json(monkeypatch, analysis_payload):
    _install(monkeypatch, "Here you go:\n" + json.dumps(analysis_payload) + "\nEnjoy!")
    assert content_service.analyze_code("x = 1", "Python").output == "6"


def test_analyze_code_rejects_schema_violation(monkeypatch):
    _install(monkeypatch, json.dumps({"asciiFlow": "x"}))
    with pytest.raises(AnalysisProviderError):
        content_service.analyze_code("x = 1", "Python")


def test_analyze_code_rejects_non_json(monkeypatch):
    _install(monkeypatch, "I cannot do that.")
    with pytest.raises(AnalysisProviderError):
        content_service.analyze_code("x = 1", "Python")


def test_transport_errors_are_wrapped(monkeypatch):
    _install(monkeypatch, error=RuntimeError("connection reset"))
    with pytest.raises(AnalysisProviderError) as excinfo:
        content_service.get_language_keywords("Go")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(config.settings, "openai_api_key", "")
    with pytest.raises(AnalysisProviderError):
        content_service.generate_notes("recursion")


def test_empty_inputs_are_rejected_before_calling_the_model(monkeypatch):
    completions = _install(monkeypatch, "{}")
    with pytest.raises(ValueError):
        content_service.analyze_code("   ", "Python")
    with pytest.raises(ValueError):
        content_service.generate_notes("")
    with pytest.raises(ValueError):
        content_service.get_keyword_explanation("Python", " ")
    assert completions.calls == []


def test_generate_notes(monkeypatch, notes_payload):
    completions = _install(monkeypatch, json.dumps(notes_payload))
    notes = content_service.generate_notes("loops")
    assert len(notes.quiz) == 3
    assert completions.calls[0]["messages"][1]["content"] == "Topic: loops"


def test_keywords_and_explanation(monkeypatch):
    _install(monkeypatch, json.dumps({"keywords": ["func", "defer", "go"]}))
    assert content_service.get_language_keywords("Go") == ["func", "defer", "go"]

    detail = {"keyword": "defer", "concept": "c", "howToUse": "h", "whereToUse": "w", "example": "e"}
    completions = _install(monkeypatch, json.dumps(detail))
    assert content_service.get_keyword_explanation("Go", "defer").keyword == "defer"
    assert '"defer"' in completions.calls[0]["messages"][1]["content"]


def test_extract_json_repairs_trailing_commas_and_smart_quotes():
    assert _extract_json('{“a”: [1, 2,],}') == {"a": [1, 2]}
    assert _extract_json('["x", "y"]') == ["x", "y"]
