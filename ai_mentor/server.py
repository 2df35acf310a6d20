"""REST API server."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from ai_mentor.models.notes import KeywordDetail, NoteData
from ai_mentor.models.analysis import PlaybackState
from ai_mentor.playback.controller import slider_to_speed_ms
from ai_mentor.renderers.animation_svg import render_frame_svg
from ai_mentor.schemas import (
    AnalyzeRequest,
    KeywordListResponse,
    NotesRequest,
    QuizScoreRequest,
    SeekRequest,
    SpeedRequest,
    VisualizerResponse,
)
from ai_mentor.services import content_service
from ai_mentor.services.content_service import AnalysisProviderError
from ai_mentor.services.quiz_service import QuizResult, score_quiz
from ai_mentor.services.visualizer_service import (
    SessionNotFoundError,
    VisualizerSession,
    visualizer_sessions,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="AI Mentor API")

PLAYBACK_ACTIONS = {
    "play": lambda c: c.play(),
    "pause": lambda c: c.pause(),
    "step-forward": lambda c: c.step_forward(),
    "step-backward": lambda c: c.step_backward(),
    "reset": lambda c: c.reset(),
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _session_not_found() -> JSONResponse:
    return _error(404, "Session not found")


def _visualizer_payload(session: VisualizerSession) -> VisualizerResponse:
    return VisualizerResponse(
        session_id=session.id,
        analysis=session.analysis,
        playback=session.controller.snapshot(),
    )


@app.on_event("shutdown")
def on_shutdown() -> None:
    visualizer_sessions.close_all()


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/notes", response_model=NoteData)
def notes_api(payload: NotesRequest):
    try:
        return content_service.generate_notes(payload.topic)
    except ValueError as exc:
        return _error(400, str(exc))
    except AnalysisProviderError as exc:
        logger.exception("Notes generation failed", extra={"topic": payload.topic})
        return _error(502, str(exc))


@app.post("/api/notes/quiz/score", response_model=QuizResult)
def quiz_score_api(payload: QuizScoreRequest):
    return score_quiz(payload.notes, payload.answers)


@app.get("/api/keywords/{language}", response_model=KeywordListResponse)
def keywords_api(language: str):
    try:
        keywords = content_service.get_language_keywords(language)
    except ValueError as exc:
        return _error(400, str(exc))
    except AnalysisProviderError as exc:
        logger.exception("Keyword listing failed", extra={"language": language})
        return _error(502, str(exc))
    return KeywordListResponse(language=language, keywords=keywords)


@app.get("/api/keywords/{language}/{keyword}", response_model=KeywordDetail)
def keyword_detail_api(language: str, keyword: str):
    try:
        return content_service.get_keyword_explanation(language, keyword)
    except ValueError as exc:
        return _error(400, str(exc))
    except AnalysisProviderError as exc:
        logger.exception("Keyword explanation failed", extra={"language": language, "keyword": keyword})
        return _error(502, str(exc))


@app.post("/api/visualizer/analyze", response_model=VisualizerResponse)
async def analyze_api(payload: AnalyzeRequest):
    if payload.session_id:
        try:
            visualizer_sessions.get(payload.session_id)
        except SessionNotFoundError:
            return _session_not_found()
    try:
        analysis = await run_in_threadpool(
            content_service.analyze_code, payload.code, payload.language, payload.program_input
        )
    except ValueError as exc:
        return _error(400, str(exc))
    except AnalysisProviderError as exc:
        # The existing session (if any) keeps its previous sequence.
        logger.exception("Code analysis failed", extra={"language": payload.language})
        return _error(502, str(exc))
    context = {"code": payload.code, "language": payload.language, "program_input": payload.program_input}
    if payload.session_id:
        try:
            session = visualizer_sessions.replace_analysis(payload.session_id, analysis, **context)
        except SessionNotFoundError:
            # Closed while the model call was in flight.
            return _session_not_found()
    else:
        session = visualizer_sessions.create(analysis, **context)
    return _visualizer_payload(session)


@app.get("/api/visualizer/{session_id}", response_model=VisualizerResponse)
async def visualizer_api(session_id: str):
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    return _visualizer_payload(session)


@app.delete("/api/visualizer/{session_id}")
async def close_visualizer_api(session_id: str):
    try:
        visualizer_sessions.close(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    return {"status": "closed", "sessionId": session_id}


@app.get("/api/visualizer/{session_id}/playback", response_model=PlaybackState)
async def playback_state_api(session_id: str):
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    return session.controller.snapshot()


@app.get("/api/visualizer/{session_id}/frame.svg")
async def playback_frame_api(session_id: str):
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    svg_text = render_frame_svg(session.analysis.animation_data.nodes, session.controller.current_event())
    return Response(content=svg_text, media_type="image/svg+xml")


# Transport endpoints are async so the controller schedules ticks on the server loop.
@app.post("/api/visualizer/{session_id}/playback/seek", response_model=PlaybackState)
async def playback_seek_api(session_id: str, payload: SeekRequest):
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    session.controller.seek(payload.index)
    return session.controller.snapshot()


@app.post("/api/visualizer/{session_id}/playback/speed", response_model=PlaybackState)
async def playback_speed_api(session_id: str, payload: SpeedRequest):
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    if payload.speed_ms is not None:
        session.controller.set_speed(payload.speed_ms)
    elif payload.slider is not None:
        session.controller.set_speed(slider_to_speed_ms(payload.slider))
    else:
        return _error(400, "Provide speedMs or slider")
    return session.controller.snapshot()


@app.post("/api/visualizer/{session_id}/playback/{action}", response_model=PlaybackState)
async def playback_action_api(session_id: str, action: str):
    handler = PLAYBACK_ACTIONS.get(action)
    if handler is None:
        return _error(400, f"Unknown playback action: {action}")
    try:
        session = visualizer_sessions.get(session_id)
    except SessionNotFoundError:
        return _session_not_found()
    handler(session.controller)
    return session.controller.snapshot()
