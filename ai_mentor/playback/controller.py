"""Execution-animation playback controller.

Walks a read pointer over a highlight sequence, either on a timer or through
manual transport calls, and exposes the event that should be rendered.

The controller owns a single pending timer. Every transition that must
invalidate scheduled work (pause, manual move, reload, close) cancels that
timer and bumps a generation counter; a tick carrying an older generation is
ignored, so a callback that races a cancellation can never increment against
a replaced sequence.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, Protocol

from ai_mentor.models.analysis import HighlightEvent, HighlightSequence, PlaybackState
from ai_mentor.tools.schema_validator import coerce_highlight_sequence
from ai_mentor.utils.config import settings

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]
Listener = Callable[[PlaybackState], None]


def _speed_bounds(min_ms: Optional[int], max_ms: Optional[int]) -> tuple[int, int]:
    lo = settings.playback_min_speed_ms if min_ms is None else min_ms
    hi = settings.playback_max_speed_ms if max_ms is None else max_ms
    return lo, hi


def clamp_speed(ms: float, min_ms: Optional[int] = None, max_ms: Optional[int] = None) -> int:
    lo, hi = _speed_bounds(min_ms, max_ms)
    return int(min(max(round(float(ms)), lo), hi))


def slider_to_speed_ms(value: float, min_ms: Optional[int] = None, max_ms: Optional[int] = None) -> int:
    """Map a "further right is faster" slider position onto a tick delay.

    With the default bounds this is ``2100 - value``.
    """
    lo, hi = _speed_bounds(min_ms, max_ms)
    return clamp_speed(lo + hi - float(value), lo, hi)


def speed_ms_to_slider(speed_ms: float, min_ms: Optional[int] = None, max_ms: Optional[int] = None) -> int:
    # The mapping is its own inverse.
    return slider_to_speed_ms(speed_ms, min_ms, max_ms)


def loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule ``callback`` on the running asyncio loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class PlaybackController:
    """Play/pause/step/seek over a HighlightSequence with a variable-speed timer."""

    def __init__(
        self,
        sequence: Any = None,
        *,
        speed_ms: Optional[int] = None,
        min_speed_ms: Optional[int] = None,
        max_speed_ms: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._min_speed_ms, self._max_speed_ms = _speed_bounds(min_speed_ms, max_speed_ms)
        initial_speed = settings.playback_default_speed_ms if speed_ms is None else speed_ms
        self._speed_ms = clamp_speed(initial_speed, self._min_speed_ms, self._max_speed_ms)
        self._scheduler: Scheduler = scheduler or loop_scheduler
        self._sequence: HighlightSequence = coerce_highlight_sequence(sequence)
        self._index = 0
        self._playing = False
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._listeners: List[Listener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def sequence(self) -> HighlightSequence:
        return self._sequence

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed_ms(self) -> int:
        return self._speed_ms

    @property
    def total_steps(self) -> int:
        return len(self._sequence)

    @property
    def last_index(self) -> int:
        return max(0, len(self._sequence) - 1)

    @property
    def has_pending_tick(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def current_event(self) -> Optional[HighlightEvent]:
        if not self._sequence:
            return None
        return self._sequence[self._index]

    def snapshot(self) -> PlaybackState:
        return PlaybackState(
            current_index=self._index,
            is_playing=self._playing,
            speed_ms=self._speed_ms,
            total_steps=len(self._sequence),
            current_event=self.current_event(),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def load(self, sequence: Any) -> None:
        """Replace the sequence and rewind; malformed input loads as empty."""
        self._cancel_timer()
        self._sequence = coerce_highlight_sequence(sequence)
        self._index = 0
        self._playing = False
        self._notify()

    def play(self) -> None:
        if self._closed or self._playing:
            return
        if self._index >= len(self._sequence) - 1:
            return
        self._playing = True
        if not self._schedule_tick():
            return
        self._notify()

    def pause(self) -> None:
        self._cancel_timer()
        if not self._playing:
            return
        self._playing = False
        self._notify()

    def step_forward(self) -> None:
        self._move_to(self._index + 1)

    def step_backward(self) -> None:
        self._move_to(self._index - 1)

    def seek(self, index: Any) -> None:
        try:
            target = int(index)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Ignoring seek to non-integer index %r", index)
            return
        self._move_to(target)

    def reset(self) -> None:
        self._cancel_timer()
        if self._index == 0 and not self._playing:
            return
        self._index = 0
        self._playing = False
        self._notify()

    def set_speed(self, ms: Any) -> None:
        """Store a clamped delay; the in-flight wait keeps its original period."""
        try:
            speed = clamp_speed(ms, self._min_speed_ms, self._max_speed_ms)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Ignoring non-numeric playback speed %r", ms)
            return
        if speed == self._speed_ms:
            return
        self._speed_ms = speed
        self._notify()

    def close(self) -> None:
        """Tear down: cancel the pending tick and drop listeners."""
        self._cancel_timer()
        self._playing = False
        self._closed = True
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _move_to(self, target: int) -> None:
        target = min(max(target, 0), self.last_index)
        if target == self._index:
            return
        self._cancel_timer()
        self._index = target
        self._settle()
        if self._playing:
            self._schedule_tick()
        self._notify()

    def _settle(self) -> None:
        # The single stop rule, applied after every index mutation.
        self._playing = self._playing and self._index < len(self._sequence) - 1

    def _schedule_tick(self) -> bool:
        """Arm the next tick; a scheduler failure stops playback instead of raising."""
        self._cancel_timer()
        generation = self._generation
        try:
            self._timer = self._scheduler(self._speed_ms / 1000.0, lambda: self._on_tick(generation))
        except RuntimeError as exc:
            logger.warning("Cannot schedule playback tick: %s", exc)
            self._playing = False
            return False
        return True

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self._closed or not self._playing:
            return
        self._timer = None
        self._index = min(self._index + 1, self.last_index)
        self._settle()
        if self._playing:
            self._schedule_tick()
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Playback listener failed")
