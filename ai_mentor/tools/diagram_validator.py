"""Validation helpers for LLM-supplied Mermaid diagrams."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List


_MERMAID_BLOCK_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"%%\s*\{\s*init", re.IGNORECASE), "init"),
    (re.compile(r"<\s*script", re.IGNORECASE), "<script>"),
    (re.compile(r"<\s*iframe", re.IGNORECASE), "<iframe>"),
    (re.compile(r"<\s*img", re.IGNORECASE), "<img>"),
    (re.compile(r"javascript:\s*", re.IGNORECASE), "javascript URI"),
)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(?P<body>[\s\S]*?)\n?```\s*$")


@dataclass
class DiagramValidationResult:
    sanitized_text: str
    warnings: List[str]
    blocked_tokens: List[str]


class DiagramValidationError(ValueError):
    """Raised when a diagram contains blocked tokens."""

    def __init__(self, message: str, result: DiagramValidationResult):
        super().__init__(message)
        self.result = result


def _scan_patterns(text: str, patterns: Iterable[tuple[re.Pattern[str], str]]) -> List[str]:
    blocked: List[str] = []
    for pattern, label in patterns:
        if pattern.search(text):
            blocked.append(label)
    return blocked


# Node shapes a generated flowchart uses for code labels: process boxes
# ``A[sum += x]``, decisions ``B{i < n}`` and rounded steps ``C(print)``.
# Each entry is (open, close, lookahead that excludes compound shapes such
# as ``[(``, ``{{`` or ``((``).
_LABEL_SHAPES: tuple[tuple[str, str, str], ...] = (
    ("[", "]", r"(?![(\[/{\\>])"),
    ("{", "}", r"(?!\{)"),
    ("(", ")", r"(?![\[(])"),
)

# Brackets inside a code label would be read as a new node shape.
_MERMAID_SPECIAL_CHARS = re.compile(r'[(){}]')


def _label_pattern(open_br: str, close_br: str, guard: str) -> re.Pattern[str]:
    return re.compile(
        r"(?P<id>[A-Za-z_][A-Za-z0-9_]*)"
        + re.escape(open_br) + guard
        + r"(?P<label>[^" + re.escape(close_br) + r"]+?)"
        + re.escape(close_br)
    )


_LABEL_PATTERNS = [(_label_pattern(o, c, g), o, c) for o, c, g in _LABEL_SHAPES]


def _quote_code_label(m: re.Match, open_br: str, close_br: str) -> str:
    label = m.group("label")
    if label.startswith('"') and label.endswith('"'):
        return m.group(0)
    if not _MERMAID_SPECIAL_CHARS.search(label):
        return m.group(0)
    safe = label.replace('"', "#quot;")
    return f'{m.group("id")}{open_br}"{safe}"{close_br}'


def _quote_mermaid_node_labels(line: str) -> str:
    """Quote node labels that hold source code.

    Traces of user programs put calls and conditions such as ``print(sum)``
    or ``if (x > 0)`` straight into node labels. Mermaid reads the inner
    brackets as shape delimiters unless the label is quoted, so
    ``C[print(sum)]`` becomes ``C["print(sum)"]``. Double quotes inside the
    label become ``#quot;``.
    """
    for pattern, open_br, close_br in _LABEL_PATTERNS:
        line = pattern.sub(lambda m: _quote_code_label(m, open_br, close_br), line)
    return line


def _strip_fence(text: str, warnings: List[str]) -> str:
    match = _FENCE_RE.match(text)
    if not match:
        return text
    warnings.append("Removed code fence")
    return match.group("body").strip()


def _sanitize_mermaid(text: str, warnings: List[str]) -> str:
    text = text.replace("\r", "")
    text = _strip_fence(text.strip(), warnings)
    # Bare "title ..." lines are invalid inside Mermaid graph/flowchart blocks
    lines = text.split("\n")
    cleaned = [line for line in lines if not re.match(r"^\s*title\s+", line, re.IGNORECASE)]
    if len(cleaned) != len(lines):
        warnings.append("Removed title directive")
    cleaned = [_quote_mermaid_node_labels(line) for line in cleaned]
    return "\n".join(cleaned).strip()


def validate_and_sanitize(diagram_text: str) -> DiagramValidationResult:
    """Validate an LLM-provided Mermaid diagram and normalize its contents."""
    warnings: List[str] = []
    payload = (diagram_text or "").strip()

    if not payload:
        result = DiagramValidationResult("", warnings, [])
        raise DiagramValidationError("Diagram text is empty", result)

    sanitized = _sanitize_mermaid(payload, warnings)
    blocked = _scan_patterns(sanitized, _MERMAID_BLOCK_PATTERNS)

    result = DiagramValidationResult(sanitized, warnings, blocked)
    if blocked:
        raise DiagramValidationError("Diagram contains blocked directives", result)
    return result
