"""Quiz scoring for generated notes."""
from __future__ import annotations

from typing import Dict, List, Optional

from ai_mentor.models.base import CamelModel
from ai_mentor.models.notes import NoteData


class QuestionResult(CamelModel):
    index: int
    selected: Optional[int]
    correct_answer: int
    is_correct: bool
    explanation: str


class QuizResult(CamelModel):
    score: int
    total: int
    results: List[QuestionResult]


def score_quiz(notes: NoteData, answers: Dict[int, int]) -> QuizResult:
    """Score ``answers`` (question index -> chosen option index); unanswered counts as wrong."""
    results: List[QuestionResult] = []
    for idx, question in enumerate(notes.quiz):
        selected = answers.get(idx)
        is_correct = selected is not None and selected == question.correct_answer
        results.append(
            QuestionResult(
                index=idx,
                selected=selected,
                correct_answer=question.correct_answer,
                is_correct=is_correct,
                explanation=question.explanation,
            )
        )
    return QuizResult(
        score=sum(1 for r in results if r.is_correct),
        total=len(results),
        results=results,
    )
