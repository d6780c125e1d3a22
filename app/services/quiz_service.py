# app/services/quiz_service.py
"""
Quiz session orchestration
- resolve viewer and schedule, register a live session
- serialize every player/UI input of one session through a lock
- create the session record on start (offline fallback)
"""
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from app.services import quiz_engine as engine
from app.services.checkpoint_schedule import load_schedule
from app.services.errors import InvalidTransition
from app.services.quiz_engine import QuizState, SessionContext, Transition
from app.services.viewer_service import Viewer, resolve_viewer

logger = logging.getLogger(__name__)


class QuizSession:
    """One viewer watching one video. All inputs go through self._lock."""

    def __init__(self, session_id: str, viewer: Viewer, context: SessionContext,
                 pass_threshold: float = engine.PASS_THRESHOLD):
        self.session_id = session_id
        self.viewer = viewer
        self.context = context
        self.pass_threshold = pass_threshold
        self._lock = threading.Lock()
        self.last_seen = time.monotonic()

    def start(self, store) -> Transition:
        with self._lock:
            self._touch()
            if self.context.state is not QuizState.NOT_STARTED:
                raise InvalidTransition(f"Cannot start while {self.context.state.value}.")
            return engine.start(self.context, self._create_record(store))

    def _create_record(self, store) -> Optional[int | str]:
        try:
            row = store.create_test_attempt({
                "employee_id": self.viewer.employee_id,
                "video_id": self.context.session.video_id,
                "started_at": datetime.now(timezone.utc),
                "is_completed": False,
            })
        except Exception:
            logger.exception("[QUIZ] session %s: test_attempts insert failed, running offline", self.session_id)
            return None
        return row.get("id") if row else None

    def _touch(self) -> None:
        self.last_seen = time.monotonic()

    def play(self) -> Transition:
        with self._lock:
            self._touch()
            return engine.on_play(self.context)

    def tick(self, played_seconds: float) -> Transition:
        with self._lock:
            self._touch()
            return engine.on_position_tick(self.context, played_seconds)

    def answer(self, answer: str) -> Transition:
        with self._lock:
            self._touch()
            return engine.on_answer(self.context, answer)

    def ended(self) -> Transition:
        with self._lock:
            self._touch()
            return engine.on_playback_ended(self.context, self.pass_threshold)

    def snapshot(self) -> Dict:
        """Presentation view of the session. Never exposes the correct answer."""
        with self._lock:
            ctx = self.context
            cp = ctx.current_checkpoint
            question = None
            if cp is not None:
                question = {
                    "id": cp.id,
                    "prompt": cp.prompt_text,
                    "options": list(cp.options),
                    "trigger_time_seconds": cp.trigger_time_seconds,
                    "attempts_used": ctx.ledger.attempts_used(cp.id),
                }
            return {
                "session_id": self.session_id,
                "employee_id": ctx.session.viewer_id,
                "full_name": self.viewer.full_name,
                "video_id": ctx.session.video_id,
                "video_url": self.viewer.video.get("video_url"),
                "video_title": self.viewer.video.get("title"),
                "session_record_id": ctx.session.session_record_id,
                "offline": ctx.is_offline,
                "state": ctx.state.value,
                "playing": ctx.playing,
                "position_seconds": ctx.tracker.position,
                "restart_count": ctx.session.restart_count,
                "question": question,
                "wrong_answer": ctx.last_wrong_answer,
                "resolved_count": len(ctx.ledger.resolved_ids()),
                "question_count": len(ctx.schedule),
                "score": ctx.score,
                "passed": ctx.passed,
            }


class QuizSessionRegistry:
    """
    Live sessions by id, in memory only.

    Sessions idle longer than idle_ttl_seconds are dropped whenever a new one is
    added, so viewers who navigate away do not pile up.
    """

    def __init__(self, idle_ttl_seconds: Optional[float] = None):
        self._sessions: Dict[str, QuizSession] = {}
        self._lock = threading.Lock()
        self.idle_ttl_seconds = idle_ttl_seconds

    def add(self, session: QuizSession) -> QuizSession:
        self.prune()
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> QuizSession:
        with self._lock:
            return self._sessions[session_id]

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def prune(self, now: Optional[float] = None) -> int:
        if self.idle_ttl_seconds is None:
            return 0
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [
                sid for sid, session in self._sessions.items()
                if now - session.last_seen > self.idle_ttl_seconds
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("[QUIZ] dropped %d idle session(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class QuizService:
    def __init__(self, store, pass_threshold: float = engine.PASS_THRESHOLD,
                 registry: Optional[QuizSessionRegistry] = None):
        self.store = store
        self.pass_threshold = pass_threshold
        self.registry = registry if registry is not None else QuizSessionRegistry()

    def open_session(self, employee_number: str) -> QuizSession:
        """
        Resolve the viewer and the schedule of their video.

        Schedule and identity errors propagate: no session exists without a
        valid schedule.
        """
        viewer = resolve_viewer(self.store, employee_number)
        schedule = load_schedule(self.store, viewer.video["id"])
        context = SessionContext.create(viewer.employee_id, viewer.video["id"], schedule)

        session = QuizSession(uuid.uuid4().hex, viewer, context, self.pass_threshold)
        logger.info("[QUIZ] session %s opened for employee=%s video=%s (%d questions)",
                    session.session_id, viewer.employee_id, viewer.video["id"], len(schedule))
        return self.registry.add(session)

    def get_session(self, session_id: str) -> QuizSession:
        return self.registry.get(session_id)

    def start_session(self, session_id: str) -> Transition:
        return self.registry.get(session_id).start(self.store)

    def abandon_session(self, session_id: str) -> bool:
        # in-flight writes are left alone, nothing is compensated
        return self.registry.discard(session_id)

    def finish_session(self, session_id: str) -> Transition:
        """
        Deliver "ended". Once FINISHED the session is released from the
        registry; the caller still holds it for the final snapshot.
        """
        session = self.registry.get(session_id)
        transition = session.ended()
        if session.context.state is QuizState.FINISHED:
            self.registry.discard(session_id)
            logger.info("[QUIZ] session %s finished and released", session_id)
        return transition
