# app/services/position_tracker.py
from __future__ import annotations

import logging
from typing import Iterable, List, Set

from app.services.checkpoint_schedule import Checkpoint

logger = logging.getLogger(__name__)


class PositionTracker:
    """
    Turns raw playback samples into checkpoint triggers.

    Every checkpoint id comes out of advance() at most once per sub-session.
    A backward seek re-arms unresolved checkpoints at or after the new position,
    resolved ones stay triggered.
    """

    def __init__(self, schedule: Iterable[Checkpoint]) -> None:
        self._schedule = sorted(schedule, key=lambda cp: cp.trigger_time_seconds)
        self._position = 0.0
        self._triggered: Set[int | str] = set()
        self._resolved: Set[int | str] = set()

    @property
    def position(self) -> float:
        return self._position

    @property
    def triggered_ids(self) -> frozenset:
        return frozenset(self._triggered)

    def advance(self, raw_seconds: float) -> List[int | str]:
        """Return newly triggered checkpoint ids, earliest trigger time first."""
        raw_seconds = max(0.0, float(raw_seconds))

        if raw_seconds < self._position:
            rearmed = {
                cp.id
                for cp in self._schedule
                if cp.trigger_time_seconds >= raw_seconds
                and cp.id in self._triggered
                and cp.id not in self._resolved
            }
            if rearmed:
                logger.debug("[TRACKER] seek back to %.2fs re-arms %s", raw_seconds, sorted(map(str, rearmed)))
            self._triggered -= rearmed
            self._position = raw_seconds
            return []

        # closed window: a sample landing exactly on a trigger time fires it
        fired = [
            cp.id
            for cp in self._schedule
            if self._position <= cp.trigger_time_seconds <= raw_seconds
            and cp.id not in self._triggered
        ]
        self._triggered.update(fired)
        self._position = raw_seconds
        return fired

    def mark_resolved(self, checkpoint_id: int | str) -> None:
        self._resolved.add(checkpoint_id)

    def reset(self) -> None:
        """Forget every trigger and resolution, back to 0s."""
        self._position = 0.0
        self._triggered.clear()
        self._resolved.clear()
