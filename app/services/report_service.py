# app/services/report_service.py
"""Read-only aggregation over the quiz event log (dashboard numbers)."""
from typing import Any, Dict, List, Optional

import pandas as pd


def _pct(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round(part / total * 100))


def _py(value):
    # numpy scalars out of groupby are not JSON serializable
    return value.item() if hasattr(value, "item") else value


def _iso(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    return value.isoformat()


def employee_stats(store) -> List[Dict[str, Any]]:
    """
    One row per (employee, video) that has at least one recorded answer.

    Counts every logged answer, restarted sub-sessions included; pass/fail
    lives on test_attempts.
    """
    responses = pd.DataFrame(store.list_user_responses())
    if responses.empty:
        return []

    if "answered_at" not in responses:
        responses["answered_at"] = None
    responses["answered_at"] = pd.to_datetime(responses["answered_at"], utc=True, errors="coerce")
    responses["is_correct"] = responses["is_correct"].astype(bool)

    keys = ["employee_id", "video_id"]
    grouped = (
        responses.groupby(keys)
        .agg(
            total_questions=("is_correct", "size"),
            correct_answers=("is_correct", "sum"),
            completed_at=("answered_at", "max"),
        )
        .reset_index()
    )

    restarts = pd.DataFrame(store.list_video_restarts())
    restart_counts = (
        restarts.groupby(keys).size().to_dict() if not restarts.empty else {}
    )

    attempts = pd.DataFrame(store.list_test_attempts())
    completed = (
        attempts.assign(is_completed=attempts["is_completed"].fillna(False).astype(bool))
        .groupby(keys)["is_completed"].any().to_dict()
        if not attempts.empty else {}
    )

    names = {e["id"]: e.get("full_name") for e in store.list_employees()}

    stats = []
    for row in grouped.itertuples(index=False):
        key = (row.employee_id, row.video_id)
        total = int(row.total_questions)
        correct = int(row.correct_answers)
        stats.append({
            "employee_id": _py(row.employee_id),
            "full_name": names.get(row.employee_id) or "Unknown",
            "video_id": _py(row.video_id),
            "total_questions": total,
            "correct_answers": correct,
            "wrong_answers": total - correct,
            "restart_count": int(restart_counts.get(key, 0)),
            "score_percent": _pct(correct, total),
            "completed_at": _iso(row.completed_at),
            "has_completed": bool(completed.get(key, False)),
        })
    return stats


def video_goal(store, video_id) -> Dict[str, Any]:
    """Passed / failed / incomplete split over the test attempts of one video."""
    video = store.get_video(video_id) or {}
    views = store.list_video_views(video_id)
    attempts = pd.DataFrame(store.list_test_attempts(video_id))

    total = len(attempts)
    if total:
        done = attempts["is_completed"].fillna(False).astype(bool)
        ok = attempts["passed"].fillna(False).astype(bool)
        passed = int((done & ok).sum())
        failed = int((done & ~ok).sum())
    else:
        passed = failed = 0
    incomplete = total - passed - failed

    return {
        "video_id": video_id,
        "title": video.get("title"),
        "total_views": len(views),
        "total_attempts": total,
        "passed": passed,
        "failed": failed,
        "incomplete": incomplete,
        "passed_percent": _pct(passed, total),
        "failed_percent": _pct(failed, total),
        "incomplete_percent": _pct(incomplete, total),
    }
