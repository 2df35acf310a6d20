"""Code visualizer analysis models.

``HighlightEvent`` is the unit the playback controller walks over; everything
else in ``CompilerAnalysis`` is rendered as-is by the presentation layer.
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional, Tuple

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ai_mentor.models.base import CamelModel

NodeType = Literal["variable", "loop", "condition", "io"]
NODE_TYPES = ("variable", "loop", "condition", "io")


class VariableEntry(CamelModel):
    name: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return value if isinstance(value, str) else str(value)


class ExecutionStep(CamelModel):
    step: int
    line: int
    variables: List[VariableEntry] = []
    description: str


class CodeSummary(CamelModel):
    functions: List[str] = []
    variables: List[str] = []
    inputs: List[str] = []


class AnimationNode(CamelModel):
    id: str
    label: str
    type: NodeType = "variable"

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> str:
        token = str(value or "").strip().lower()
        return token if token in NODE_TYPES else "variable"


class HighlightEvent(CamelModel):
    """One moment of the trace: the focused node and an optional value to show."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    node_id: str
    value: Any = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


HighlightSequence = Tuple[HighlightEvent, ...]


class AnimationData(CamelModel):
    nodes: List[AnimationNode] = []
    highlight_sequence: List[HighlightEvent] = []


class CompilerAnalysis(CamelModel):
    ascii_flow: str
    state_table: List[ExecutionStep]
    execution_logic: str
    mermaid_chart: str
    narration: List[str]
    output: str = ""
    summary: Optional[CodeSummary] = None
    animation_data: AnimationData = Field(default_factory=AnimationData)


class PlaybackState(CamelModel):
    """Snapshot of a playback controller handed to the presentation layer."""

    current_index: int
    is_playing: bool
    speed_ms: int
    total_steps: int
    current_event: Optional[HighlightEvent] = None
