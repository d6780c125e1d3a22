# app/services/viewer_service.py
from dataclasses import dataclass
from typing import Dict

from app.services.errors import MissingViewerIdentity, VideoNotAssigned


@dataclass(frozen=True)
class Viewer:
    employee_id: int | str
    employee_number: str
    full_name: str
    video: Dict


def resolve_viewer(store, employee_number: str | None) -> Viewer:
    """
    Employee number -> employee row -> first assigned video.

    Raises:
        MissingViewerIdentity: blank or unknown employee number
        VideoNotAssigned: employee exists but has no (existing) video
    """
    number = (employee_number or "").strip()
    if not number:
        raise MissingViewerIdentity("Employee number is required.")

    employee = store.find_employee_by_number(number)
    if not employee:
        raise MissingViewerIdentity(f"Unknown employee number '{number}'.")

    for video_id in store.list_assigned_video_ids(employee["id"]):
        video = store.get_video(video_id)
        if video:
            return Viewer(
                employee_id=employee["id"],
                employee_number=number,
                full_name=employee.get("full_name") or "",
                video=video,
            )

    raise VideoNotAssigned(f"Employee '{number}' has no assigned video.")
