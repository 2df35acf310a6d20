"""Boundary validation for model-produced JSON.

Everything the Analysis Provider returns passes through here before it
reaches the rest of the application, so downstream code (the playback
controller in particular) can rely on the model invariants without
re-checking them.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ai_mentor.models.analysis import CompilerAnalysis, HighlightEvent, HighlightSequence
from ai_mentor.models.notes import KeywordDetail, NoteData
from ai_mentor.tools.diagram_validator import DiagramValidationError, validate_and_sanitize

logger = logging.getLogger(__name__)


def coerce_highlight_sequence(raw: Any) -> HighlightSequence:
    """Return an immutable highlight sequence, or an empty one if ``raw`` is malformed.

    A sequence is malformed when it is not a list/tuple or when any entry lacks
    a string ``nodeId``. Partial sequences are not salvaged: skipping entries
    would silently desynchronise the trace from the narration.
    """
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        logger.warning("Highlight sequence is not a list (%s); treating as empty", type(raw).__name__)
        return ()
    events: List[HighlightEvent] = []
    for position, item in enumerate(raw):
        if isinstance(item, HighlightEvent):
            events.append(item)
            continue
        node_id = item.get("nodeId", item.get("node_id")) if isinstance(item, dict) else None
        if not isinstance(node_id, str) or not node_id:
            logger.warning("Highlight entry %d has no nodeId; treating sequence as empty", position)
            return ()
        events.append(HighlightEvent(node_id=node_id, value=item.get("value")))
    return tuple(events)


def sanitize_mermaid_field(text: str, field_name: str) -> str:
    """Sanitize a Mermaid field; blocked or empty diagrams collapse to ''."""
    try:
        result = validate_and_sanitize(text)
    except DiagramValidationError as exc:
        logger.warning(
            "Dropping %s: %s", field_name, exc, extra={"blocked_tokens": exc.result.blocked_tokens}
        )
        return ""
    if result.warnings:
        logger.info("Sanitized %s: %s", field_name, ", ".join(result.warnings))
    return result.sanitized_text


def validate_note_data(data: Dict[str, Any]) -> NoteData:
    notes = NoteData.model_validate(data)
    return notes.model_copy(
        update={"flowchart_mermaid": sanitize_mermaid_field(notes.flowchart_mermaid, "flowchartMermaid")}
    )


def validate_keyword_detail(data: Dict[str, Any]) -> KeywordDetail:
    return KeywordDetail.model_validate(data)


def validate_keyword_list(data: Any) -> List[str]:
    """Accept a bare JSON array or an object wrapping one under ``keywords``."""
    if isinstance(data, dict):
        data = data.get("keywords", [])
    if not isinstance(data, list):
        raise ValueError("Keyword list must be a JSON array")
    seen = set()
    keywords: List[str] = []
    for item in data:
        if not isinstance(item, str):
            continue
        token = item.strip()
        if token and token not in seen:
            seen.add(token)
            keywords.append(token)
    return keywords


def validate_compiler_analysis(data: Dict[str, Any]) -> CompilerAnalysis:
    payload = dict(data)
    animation: Optional[Dict[str, Any]] = payload.get("animationData")
    if isinstance(animation, dict):
        animation = dict(animation)
        animation["highlightSequence"] = list(coerce_highlight_sequence(animation.get("highlightSequence")))
        payload["animationData"] = animation
    elif animation is not None:
        logger.warning("animationData is not an object; dropping it")
        payload.pop("animationData")
    analysis = CompilerAnalysis.model_validate(payload)
    return analysis.model_copy(
        update={"mermaid_chart": sanitize_mermaid_field(analysis.mermaid_chart, "mermaidChart")}
    )
