# app/services/event_emitter.py
import logging
from typing import Iterable

from app.services.quiz_engine import Intent, LogAnswer, LogRestart, LogView, UpsertSessionCompletion

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Stateless relay from transition intents to the store.

    One intent is one write. Nothing is deduplicated here and a failure never
    travels back to the state machine: it is logged and dropped.
    """

    def __init__(self, store):
        self.store = store

    def emit(self, intent: Intent) -> bool:
        try:
            self._write(intent)
        except Exception:
            logger.exception("[EMIT] %s dropped", type(intent).__name__)
            return False
        logger.debug("[EMIT] %s written", type(intent).__name__)
        return True

    def emit_all(self, intents: Iterable[Intent]) -> int:
        """Emit each intent independently; returns how many were written."""
        return sum(1 for intent in intents if self.emit(intent))

    def _write(self, intent: Intent) -> None:
        if isinstance(intent, LogView):
            self.store.insert_video_view({
                "employee_id": intent.employee_id,
                "video_id": intent.video_id,
                "started_at": intent.started_at,
            })
        elif isinstance(intent, LogAnswer):
            self.store.insert_user_response({
                "employee_id": intent.employee_id,
                "video_id": intent.video_id,
                "question_id": intent.question_id,
                "selected_answer": intent.selected_answer,
                "is_correct": intent.is_correct,
                "attempt_number": intent.attempt_number,
                "answered_at": intent.answered_at,
            })
        elif isinstance(intent, LogRestart):
            self.store.insert_video_restart({
                "employee_id": intent.employee_id,
                "video_id": intent.video_id,
                "restart_count": intent.restart_count,
                "restarted_at": intent.restarted_at,
            })
        elif isinstance(intent, UpsertSessionCompletion):
            self.store.update_test_attempt(intent.session_record_id, {
                "completed_at": intent.completed_at,
                "passed": intent.passed,
                "is_completed": True,
            })
        else:
            raise TypeError(f"Unknown intent: {intent!r}")
