"""Topic notes and quiz models."""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from ai_mentor.models.base import CamelModel


class QuizQuestion(CamelModel):
    question: str
    options: List[str]
    correct_answer: int = Field(..., description="Index of the correct option (0-based)")
    explanation: str


class NoteData(CamelModel):
    concept: str
    types: Optional[List[str]] = None
    syntax: str
    flowchart_mermaid: str
    example_program: str
    error_prone_program: str
    how_to_use: str
    restrictions: str
    use_cases: List[str]
    quiz: List[QuizQuestion]


class KeywordDetail(CamelModel):
    keyword: str
    concept: str
    how_to_use: str
    where_to_use: str
    example: str
