# app/services/checkpoint_schedule.py
"""
Checkpoint schedule loading.

- fetch video_questions rows for a video
- validate each row into a strict Checkpoint
- reject empty schedules and duplicate trigger times
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import ValidationError

from app.schemas.quiz import VideoQuestionRecord
from app.services.errors import MalformedCheckpoint, ScheduleConflict, ScheduleNotFound


@dataclass(frozen=True)
class Checkpoint:
    """One question bound to a playback timestamp."""

    id: int | str
    trigger_time_seconds: float
    prompt_text: str
    options: Tuple[str, ...]
    correct_option_index: int

    @property
    def correct_answer_text(self) -> str:
        return self.options[self.correct_option_index]


def _checkpoint_from_row(row: Dict[str, Any]) -> Checkpoint:
    try:
        record = VideoQuestionRecord.model_validate(row)
    except ValidationError as e:
        raise MalformedCheckpoint(f"Question '{row.get('id', '<unknown>')}' is malformed: {e}") from e

    if len(record.options) < 2:
        raise MalformedCheckpoint(f"Question '{record.id}' needs at least 2 options.")
    if not 0 <= record.correct_answer < len(record.options):
        raise MalformedCheckpoint(
            f"Question '{record.id}' has correct_answer {record.correct_answer} "
            f"outside of {len(record.options)} options."
        )

    return Checkpoint(
        id=record.id,
        trigger_time_seconds=record.timestamp,
        prompt_text=record.question,
        options=tuple(record.options),
        correct_option_index=record.correct_answer,
    )


def build_schedule(rows: Iterable[Dict[str, Any]], video_id: int | str = "<unknown>") -> Tuple[Checkpoint, ...]:
    """Validate raw rows into a schedule ordered by trigger time."""
    rows = list(rows)
    if not rows:
        raise ScheduleNotFound(f"Video '{video_id}' has no questions.")

    checkpoints: List[Checkpoint] = [_checkpoint_from_row(row) for row in rows]

    seen: Dict[float, Checkpoint] = {}
    for cp in checkpoints:
        previous = seen.get(cp.trigger_time_seconds)
        if previous is not None:
            raise ScheduleConflict(
                f"Questions '{previous.id}' and '{cp.id}' share trigger time {cp.trigger_time_seconds}s."
            )
        seen[cp.trigger_time_seconds] = cp

    return tuple(sorted(checkpoints, key=lambda cp: cp.trigger_time_seconds))


def load_schedule(store, video_id: int | str) -> Tuple[Checkpoint, ...]:
    """Fetch and validate the schedule of one video."""
    return build_schedule(store.list_video_questions(video_id), video_id)
