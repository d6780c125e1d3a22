# app/services/quiz_engine.py
"""
Timestamped quiz state machine.

Every transition takes an explicit SessionContext, updates it in place and
returns a Transition carrying the side-effect intents for the event emitter.
The in-memory transition is final: a failed persistence write never rolls
it back.

    NOT_STARTED -> AWAITING_PLAYBACK <-> QUESTION_OPEN -> FINISHED
                         ^                    |
                         +---- RESTARTING <---+  (second wrong answer)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from app.services.attempt_ledger import AttemptLedger, AttemptOutcome
from app.services.checkpoint_schedule import Checkpoint
from app.services.errors import InvalidTransition
from app.services.position_tracker import PositionTracker

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 0.6


def _now() -> datetime:
    return datetime.now(timezone.utc)


class QuizState(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING_PLAYBACK = "awaiting_playback"
    QUESTION_OPEN = "question_open"
    RESTARTING = "restarting"
    FINISHED = "finished"


# ---------- Side-effect intents ----------

@dataclass(frozen=True)
class LogView:
    employee_id: int | str
    video_id: int | str
    started_at: datetime


@dataclass(frozen=True)
class LogAnswer:
    employee_id: int | str
    video_id: int | str
    question_id: int | str
    selected_answer: str
    is_correct: bool
    attempt_number: int
    answered_at: datetime


@dataclass(frozen=True)
class LogRestart:
    employee_id: int | str
    video_id: int | str
    restart_count: int  # 1-based index of this restart
    restarted_at: datetime


@dataclass(frozen=True)
class UpsertSessionCompletion:
    session_record_id: int | str
    completed_at: datetime
    passed: bool
    score: float


Intent = Union[LogView, LogAnswer, LogRestart, UpsertSessionCompletion]


# ---------- Session state ----------

@dataclass
class Session:
    viewer_id: int | str
    video_id: int | str
    session_record_id: Optional[int | str] = None
    restart_count: int = 0
    is_active: bool = False
    is_finished: bool = False


@dataclass
class SessionContext:
    session: Session
    schedule: Tuple[Checkpoint, ...]
    tracker: PositionTracker
    ledger: AttemptLedger
    state: QuizState = QuizState.NOT_STARTED
    current_checkpoint_id: Optional[int | str] = None
    pending: List[int | str] = field(default_factory=list)
    playing: bool = False
    view_logged: bool = False
    last_wrong_answer: Optional[str] = None
    score: Optional[float] = None
    passed: Optional[bool] = None

    @classmethod
    def create(cls, viewer_id, video_id, schedule) -> "SessionContext":
        schedule = tuple(sorted(schedule, key=lambda cp: cp.trigger_time_seconds))
        return cls(
            session=Session(viewer_id=viewer_id, video_id=video_id),
            schedule=schedule,
            tracker=PositionTracker(schedule),
            ledger=AttemptLedger(schedule),
        )

    @property
    def checkpoints(self) -> Dict[int | str, Checkpoint]:
        return {cp.id: cp for cp in self.schedule}

    @property
    def current_checkpoint(self) -> Optional[Checkpoint]:
        if self.current_checkpoint_id is None:
            return None
        return self.checkpoints[self.current_checkpoint_id]

    @property
    def is_offline(self) -> bool:
        return self.session.session_record_id is None


@dataclass(frozen=True)
class Transition:
    context: SessionContext
    intents: Tuple[Intent, ...] = ()
    outcome: Optional[AttemptOutcome] = None
    seek_to: Optional[float] = None


def _require(ctx: SessionContext, *allowed: QuizState, action: str) -> None:
    if ctx.state not in allowed:
        raise InvalidTransition(f"Cannot {action} while {ctx.state.value}.")


# ---------- Transitions ----------

def start(ctx: SessionContext, session_record_id: Optional[int | str]) -> Transition:
    """Begin playback. A None record id means the session runs offline."""
    _require(ctx, QuizState.NOT_STARTED, action="start")

    ctx.session.session_record_id = session_record_id
    ctx.session.is_active = True
    ctx.state = QuizState.AWAITING_PLAYBACK
    ctx.playing = True

    if session_record_id is None:
        logger.warning(
            "[QUIZ] viewer=%s video=%s started offline, completion will not be recorded",
            ctx.session.viewer_id, ctx.session.video_id,
        )
    else:
        logger.info("[QUIZ] viewer=%s video=%s started record=%s",
                    ctx.session.viewer_id, ctx.session.video_id, session_record_id)
    return Transition(ctx)


def on_play(ctx: SessionContext) -> Transition:
    """Log one view per sub-session on the first play signal."""
    if ctx.state not in (QuizState.AWAITING_PLAYBACK, QuizState.QUESTION_OPEN) or ctx.view_logged:
        return Transition(ctx)

    ctx.view_logged = True
    return Transition(ctx, (LogView(ctx.session.viewer_id, ctx.session.video_id, _now()),))


def on_position_tick(ctx: SessionContext, raw_seconds: float) -> Transition:
    """
    Feed one playback sample.

    Ignored unless AWAITING_PLAYBACK, so no question can trigger while another
    one is open. When several checkpoints fire in the same window only the
    earliest opens; the rest wait in ctx.pending for later ticks.
    """
    if ctx.state is not QuizState.AWAITING_PLAYBACK:
        return Transition(ctx)

    if raw_seconds < ctx.tracker.position:
        # these are re-armed in the tracker and will fire again
        checkpoints = ctx.checkpoints
        ctx.pending = [
            cp_id for cp_id in ctx.pending
            if checkpoints[cp_id].trigger_time_seconds < raw_seconds
        ]

    for cp_id in ctx.tracker.advance(raw_seconds):
        if cp_id not in ctx.pending:
            ctx.pending.append(cp_id)

    _open_next(ctx, raw_seconds)
    return Transition(ctx)


def _open_next(ctx: SessionContext, at_seconds: float) -> bool:
    """Open the earliest queued checkpoint, if any."""
    if not ctx.pending:
        return False

    checkpoints = ctx.checkpoints
    ctx.pending.sort(key=lambda cp_id: checkpoints[cp_id].trigger_time_seconds)
    cp_id = ctx.pending.pop(0)

    ctx.current_checkpoint_id = cp_id
    ctx.last_wrong_answer = None
    ctx.state = QuizState.QUESTION_OPEN
    ctx.playing = False
    logger.info("[QUIZ] viewer=%s question=%s opened at %.2fs (queued=%d)",
                ctx.session.viewer_id, cp_id, at_seconds, len(ctx.pending))
    return True


def on_answer(ctx: SessionContext, answer: str) -> Transition:
    _require(ctx, QuizState.QUESTION_OPEN, action="answer")

    cp = ctx.current_checkpoint
    attempt_number = ctx.ledger.attempts_used(cp.id) + 1
    outcome = ctx.ledger.record_answer(cp.id, answer)

    intents: List[Intent] = [
        LogAnswer(
            employee_id=ctx.session.viewer_id,
            video_id=ctx.session.video_id,
            question_id=cp.id,
            selected_answer=answer,
            is_correct=outcome is AttemptOutcome.CORRECT_ADVANCE,
            attempt_number=attempt_number,
            answered_at=_now(),
        )
    ]
    logger.info("[QUIZ] viewer=%s question=%s attempt=%d -> %s",
                ctx.session.viewer_id, cp.id, attempt_number, outcome.value)

    if outcome is AttemptOutcome.CORRECT_ADVANCE:
        ctx.tracker.mark_resolved(cp.id)
        ctx.current_checkpoint_id = None
        ctx.last_wrong_answer = None
        ctx.state = QuizState.AWAITING_PLAYBACK
        ctx.playing = True
        return Transition(ctx, tuple(intents), outcome)

    if outcome is AttemptOutcome.INCORRECT_RETRY:
        ctx.last_wrong_answer = answer
        return Transition(ctx, tuple(intents), outcome)

    intents.append(_restart(ctx))
    return Transition(ctx, tuple(intents), outcome, seek_to=0.0)


def _restart(ctx: SessionContext) -> LogRestart:
    """Throw away the sub-session. The restart intent is built before any reset."""
    ctx.state = QuizState.RESTARTING
    restart_index = ctx.session.restart_count + 1
    intent = LogRestart(
        employee_id=ctx.session.viewer_id,
        video_id=ctx.session.video_id,
        restart_count=restart_index,
        restarted_at=_now(),
    )
    ctx.session.restart_count = restart_index

    ctx.ledger.reset_all()
    ctx.tracker.reset()
    ctx.pending.clear()
    ctx.current_checkpoint_id = None
    ctx.last_wrong_answer = None
    ctx.view_logged = False

    ctx.state = QuizState.AWAITING_PLAYBACK
    ctx.playing = True
    logger.info("[QUIZ] viewer=%s video=%s restart #%d",
                ctx.session.viewer_id, ctx.session.video_id, restart_index)
    return intent


def on_playback_ended(ctx: SessionContext, pass_threshold: float = PASS_THRESHOLD) -> Transition:
    if ctx.state is QuizState.FINISHED:
        return Transition(ctx)  # duplicate "ended" from the player
    _require(ctx, QuizState.AWAITING_PLAYBACK, action="finish")

    # questions that fired but were never asked are asked before finishing
    if _open_next(ctx, ctx.tracker.position):
        return Transition(ctx)

    score = len(ctx.ledger.resolved_ids()) / len(ctx.schedule)
    passed = score >= pass_threshold

    ctx.score = score
    ctx.passed = passed
    ctx.playing = False
    ctx.session.is_active = False
    ctx.session.is_finished = True
    ctx.state = QuizState.FINISHED

    intents: Tuple[Intent, ...] = ()
    if ctx.session.session_record_id is not None:
        intents = (UpsertSessionCompletion(ctx.session.session_record_id, _now(), passed, score),)

    logger.info("[QUIZ] viewer=%s video=%s finished score=%.2f passed=%s restarts=%d",
                ctx.session.viewer_id, ctx.session.video_id, score, passed, ctx.session.restart_count)
    return Transition(ctx, intents)
