"""Shared fixtures: a manual clock for the playback timer and canned model output."""
from __future__ import annotations

import copy
from typing import Callable, List

import pytest


class FakeTimer:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Collects call_later-style requests and fires them when the clock is advanced."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            timer.callback()
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


SAMPLE_ANALYSIS = {
    "asciiFlow": "[sum=0] -> (i<=3?) -> [sum+=i] -> print",
    "stateTable": [
        {"step": 1, "line": 1, "variables": [{"name": "sum", "value": "0"}], "description": "init sum"},
        {"step": 2, "line": 2, "variables": [{"name": "i", "value": 1}], "description": "loop starts"},
    ],
    "executionLogic": "Adds the numbers 1..3, like counting coins into a jar.",
    "mermaidChart": "```mermaid\nflowchart TD\n  A[sum = 0] --> B{i <= 3}\n  B --> C[print(sum)]\n```",
    "narration": ["Set sum to 0", "Loop i from 1 to 3", "Print sum"],
    "output": "6",
    "animationData": {
        "nodes": [
            {"id": "sum", "label": "sum", "type": "variable"},
            {"id": "loop", "label": "for i", "type": "loop"},
            {"id": "out", "label": "console.log", "type": "output"},
        ],
        "highlightSequence": [
            {"nodeId": "sum", "value": "0"},
            {"nodeId": "loop", "value": "1"},
            {"nodeId": "sum", "value": "1"},
            {"nodeId": "out"},
        ],
    },
}

SAMPLE_NOTES = {
    "concept": "A loop repeats a block of code.",
    "types": ["for", "while"],
    "syntax": "for (let i = 0; i < n; i++) { ... }",
    "flowchartMermaid": "flowchart TD\n  title Loops\n  A[start] --> B{i < n}",
    "exampleProgram": "for (let i = 0; i < 3; i++) console.log(i);",
    "errorProneProgram": "for (let i = 0; i <= arr.length; i++) {}",
    "howToUse": "Pick a counter and a condition.",
    "restrictions": "Avoid mutating the counter inside the body.",
    "useCases": ["iterating arrays"],
    "quiz": [
        {"question": "Q1", "options": ["a", "b"], "correctAnswer": 1, "explanation": "b"},
        {"question": "Q2", "options": ["a", "b", "c"], "correctAnswer": 0, "explanation": "a"},
        {"question": "Q3", "options": ["a", "b"], "correctAnswer": 0, "explanation": "a"},
    ],
}


@pytest.fixture
def analysis_payload() -> dict:
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def notes_payload() -> dict:
    return copy.deepcopy(SAMPLE_NOTES)
