from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from app.deps import get_emitter, get_quiz_service
from app.routers.errors import to_http
from app.schemas.quiz import (
    AnswerRequest,
    OpenSessionRequest,
    ProgressRequest,
    SessionStateResponse,
    TransitionResponse,
)
from app.services.errors import QuizError
from app.services.event_emitter import EventEmitter
from app.services.quiz_engine import Transition
from app.services.quiz_service import QuizService, QuizSession

router = APIRouter(prefix="/api/quiz/sessions", tags=["quiz"])


def _get_session(service: QuizService, session_id: str) -> QuizSession:
    try:
        return service.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail={"message": "session_not_found"})


# hand the intents to a background task and answer right away:
# the response never waits on a persistence write
def _respond(session: QuizSession, transition: Transition,
             background_tasks: BackgroundTasks, emitter: EventEmitter) -> dict:
    if transition.intents:
        background_tasks.add_task(emitter.emit_all, transition.intents)
    return {
        **session.snapshot(),
        "outcome": transition.outcome.value if transition.outcome else None,
        "seek_to": transition.seek_to,
    }


# ---- create ----

@router.post("", response_model=SessionStateResponse, status_code=201)
def open_session(payload: OpenSessionRequest, service: QuizService = Depends(get_quiz_service)):
    try:
        session = service.open_session(payload.employee_number)
    except QuizError as e:
        raise to_http(e)
    return session.snapshot()


@router.get("/{session_id}", response_model=SessionStateResponse)
def get_session(session_id: str, service: QuizService = Depends(get_quiz_service)):
    return _get_session(service, session_id).snapshot()


# abandon: drop the live session, in-flight writes are not compensated
@router.delete("/{session_id}", status_code=204)
def abandon_session(session_id: str, service: QuizService = Depends(get_quiz_service)):
    if not service.abandon_session(session_id):
        raise HTTPException(status_code=404, detail={"message": "session_not_found"})


# ---- player / UI inputs ----

@router.post("/{session_id}/start", response_model=TransitionResponse)
def start_session(
    session_id: str,
    background_tasks: BackgroundTasks,
    service: QuizService = Depends(get_quiz_service),
    emitter: EventEmitter = Depends(get_emitter),
):
    session = _get_session(service, session_id)
    try:
        transition = service.start_session(session_id)
    except QuizError as e:
        raise to_http(e)
    return _respond(session, transition, background_tasks, emitter)


@router.post("/{session_id}/play", response_model=TransitionResponse)
def play(
    session_id: str,
    background_tasks: BackgroundTasks,
    service: QuizService = Depends(get_quiz_service),
    emitter: EventEmitter = Depends(get_emitter),
):
    session = _get_session(service, session_id)
    return _respond(session, session.play(), background_tasks, emitter)


@router.post("/{session_id}/progress", response_model=TransitionResponse)
def progress(
    session_id: str,
    payload: ProgressRequest,
    background_tasks: BackgroundTasks,
    service: QuizService = Depends(get_quiz_service),
    emitter: EventEmitter = Depends(get_emitter),
):
    session = _get_session(service, session_id)
    return _respond(session, session.tick(payload.played_seconds), background_tasks, emitter)


@router.post("/{session_id}/answers", response_model=TransitionResponse)
def answer(
    session_id: str,
    payload: AnswerRequest,
    background_tasks: BackgroundTasks,
    service: QuizService = Depends(get_quiz_service),
    emitter: EventEmitter = Depends(get_emitter),
):
    session = _get_session(service, session_id)
    try:
        transition = session.answer(payload.answer)
    except QuizError as e:
        raise to_http(e)
    return _respond(session, transition, background_tasks, emitter)


@router.post("/{session_id}/ended", response_model=TransitionResponse)
def ended(
    session_id: str,
    background_tasks: BackgroundTasks,
    service: QuizService = Depends(get_quiz_service),
    emitter: EventEmitter = Depends(get_emitter),
):
    session = _get_session(service, session_id)
    try:
        transition = service.finish_session(session_id)
    except QuizError as e:
        raise to_http(e)
    except KeyError:
        raise HTTPException(status_code=404, detail={"message": "session_not_found"})
    return _respond(session, transition, background_tasks, emitter)
