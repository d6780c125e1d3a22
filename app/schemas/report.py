from typing import Optional, Union

from pydantic import BaseModel

RecordId = Union[int, str]


class EmployeeStatsResponse(BaseModel):
    employee_id: RecordId
    full_name: str
    video_id: RecordId
    total_questions: int
    correct_answers: int
    wrong_answers: int
    restart_count: int
    score_percent: int
    completed_at: Optional[str] = None
    has_completed: bool


class VideoGoalResponse(BaseModel):
    video_id: RecordId
    title: Optional[str] = None
    total_views: int
    total_attempts: int
    passed: int
    failed: int
    incomplete: int
    passed_percent: int
    failed_percent: int
    incomplete_percent: int
