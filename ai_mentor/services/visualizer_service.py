"""In-process visualizer sessions: one analysis and one playback controller each."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ai_mentor.models.analysis import CompilerAnalysis
from ai_mentor.playback.controller import PlaybackController, Scheduler
from ai_mentor.utils.config import settings

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    pass


@dataclass
class VisualizerSession:
    id: str
    code: str
    language: str
    program_input: str
    analysis: CompilerAnalysis
    controller: PlaybackController
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class VisualizerSessionStore:
    def __init__(self, scheduler: Optional[Scheduler] = None, max_sessions: Optional[int] = None) -> None:
        self._sessions: Dict[str, VisualizerSession] = {}
        self._scheduler = scheduler
        self._max_sessions = settings.visualizer_max_sessions if max_sessions is None else max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        analysis: CompilerAnalysis,
        *,
        code: str = "",
        language: str = "",
        program_input: str = "",
    ) -> VisualizerSession:
        controller = PlaybackController(
            analysis.animation_data.highlight_sequence,
            scheduler=self._scheduler,
        )
        session = VisualizerSession(
            id=str(uuid.uuid4()),
            code=code,
            language=language,
            program_input=program_input,
            analysis=analysis,
            controller=controller,
        )
        self._sessions[session.id] = session
        logger.info("Created visualizer session %s", session.id)
        self._evict_oldest(keep=session.id)
        return session

    def _evict_oldest(self, keep: str) -> None:
        while len(self._sessions) > max(self._max_sessions, 1):
            oldest = min(
                (s for s in self._sessions.values() if s.id != keep),
                key=lambda s: s.created_at,
            )
            del self._sessions[oldest.id]
            oldest.controller.close()
            logger.info("Evicted visualizer session %s", oldest.id)

    def get(self, session_id: str) -> VisualizerSession:
        session = self._sessions.get(str(session_id))
        if not session:
            raise SessionNotFoundError(session_id)
        return session

    def replace_analysis(
        self,
        session_id: str,
        analysis: CompilerAnalysis,
        *,
        code: str = "",
        language: str = "",
        program_input: str = "",
    ) -> VisualizerSession:
        """Swap in a new analysis; the controller reloads and rewinds."""
        session = self.get(session_id)
        session.analysis = analysis
        session.code = code
        session.language = language
        session.program_input = program_input
        session.controller.load(analysis.animation_data.highlight_sequence)
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(str(session_id), None)
        if not session:
            raise SessionNotFoundError(session_id)
        session.controller.close()
        logger.info("Closed visualizer session %s", session_id)

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.controller.close()
        self._sessions.clear()

    def list_ids(self) -> List[str]:
        return list(self._sessions)


visualizer_sessions = VisualizerSessionStore()
