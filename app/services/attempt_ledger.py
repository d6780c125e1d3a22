# app/services/attempt_ledger.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Set

from app.services.checkpoint_schedule import Checkpoint

MAX_ATTEMPTS = 2


class AttemptOutcome(str, Enum):
    CORRECT_ADVANCE = "correct_advance"
    INCORRECT_RETRY = "incorrect_retry"
    INCORRECT_EXHAUSTED = "incorrect_exhausted"


@dataclass
class AttemptState:
    attempts_used: int = 0
    last_submitted_answer: Optional[str] = None
    resolved: bool = False


class AttemptLedger:
    """Per-checkpoint retry bookkeeping for the current sub-session."""

    def __init__(self, schedule: Iterable[Checkpoint]) -> None:
        self._checkpoints: Dict[int | str, Checkpoint] = {cp.id: cp for cp in schedule}
        self._states: Dict[int | str, AttemptState] = {}

    def state(self, checkpoint_id: int | str) -> AttemptState:
        if checkpoint_id not in self._checkpoints:
            raise KeyError(checkpoint_id)
        return self._states.setdefault(checkpoint_id, AttemptState())

    def attempts_used(self, checkpoint_id: int | str) -> int:
        return self.state(checkpoint_id).attempts_used

    def resolved_ids(self) -> Set[int | str]:
        return {cp_id for cp_id, st in self._states.items() if st.resolved}

    def record_answer(self, checkpoint_id: int | str, answer: str) -> AttemptOutcome:
        """
        Score one submission.

        The first wrong answer earns a retry, the second is exhausted. The ledger
        never resets itself on exhaustion; the state machine calls reset_all().
        """
        st = self.state(checkpoint_id)
        checkpoint = self._checkpoints[checkpoint_id]

        if answer == checkpoint.correct_answer_text:
            st.resolved = True
            return AttemptOutcome.CORRECT_ADVANCE

        st.last_submitted_answer = answer
        if st.attempts_used == 0:
            st.attempts_used = 1
            return AttemptOutcome.INCORRECT_RETRY

        st.attempts_used = MAX_ATTEMPTS
        return AttemptOutcome.INCORRECT_EXHAUSTED

    def reset_all(self) -> None:
        self._states.clear()
