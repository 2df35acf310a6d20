import pytest

from ai_mentor.tools.diagram_validator import DiagramValidationError, validate_and_sanitize


MERMAID_ALLOWED = """graph LR
  A[Client] --> B[Server]
"""


MERMAID_BLOCKED = """%%{init: {"themeVariables": {"dark": true}}}%%
graph LR
  A --> B
"""


def test_validate_mermaid_baseline_passes():
    result = validate_and_sanitize(MERMAID_ALLOWED)
    assert "graph LR" in result.sanitized_text
    assert result.blocked_tokens == []
    assert result.warnings == []


def test_validate_mermaid_blocks_init_sections():
    with pytest.raises(DiagramValidationError) as excinfo:
        validate_and_sanitize(MERMAID_BLOCKED)
    assert any("init" in token for token in excinfo.value.result.blocked_tokens)


def test_empty_diagram_is_rejected():
    with pytest.raises(DiagramValidationError):
        validate_and_sanitize("   ")


def test_code_fence_is_stripped():
    result = validate_and_sanitize("```mermaid\nflowchart TD\n  A --> B\n```")
    assert result.sanitized_text == "flowchart TD\n  A --> B"
    assert "Removed code fence" in result.warnings


def test_sanitize_strips_title_and_quotes_code_labels():
    text = """flowchart TD
    title Sum loop
    A[let sum = 0] --> B{i <= arr.length()}
    B -->|yes| C[sum += arr.at(i)]
"""
    result = validate_and_sanitize(text)
    assert "title" not in result.sanitized_text
    assert 'B{"i <= arr.length()"}' in result.sanitized_text
    assert "A[let sum = 0]" in result.sanitized_text
    assert 'C["sum += arr.at(i)"]' in result.sanitized_text


def test_quoting_leaves_quoted_and_compound_shapes_alone():
    text = """flowchart LR
    E[say("hi")] --> F["already (quoted)"]
    F --> G[(db)]
"""
    result = validate_and_sanitize(text)
    assert 'E["say(#quot;hi#quot;)"]' in result.sanitized_text
    assert 'F["already (quoted)"]' in result.sanitized_text
    assert "G[(db)]" in result.sanitized_text
