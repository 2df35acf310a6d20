"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from ai_mentor.models.analysis import CompilerAnalysis, PlaybackState
from ai_mentor.models.base import CamelModel
from ai_mentor.models.notes import NoteData


class NotesRequest(CamelModel):
    topic: str


class QuizScoreRequest(CamelModel):
    notes: NoteData
    answers: Dict[int, int] = Field(default_factory=dict)


class KeywordListResponse(CamelModel):
    language: str
    keywords: List[str]


class AnalyzeRequest(CamelModel):
    code: str
    language: str = "JavaScript"
    program_input: str = Field(default="", alias="input")
    session_id: Optional[str] = None


class VisualizerResponse(CamelModel):
    session_id: str
    analysis: CompilerAnalysis
    playback: PlaybackState


class SeekRequest(CamelModel):
    index: int


class SpeedRequest(CamelModel):
    speed_ms: Optional[int] = None
    slider: Optional[int] = None
