import json
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordId = Union[int, str]

# -- Persistence boundary --

# video_questions row -> validated before it becomes a Checkpoint
class VideoQuestionRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: RecordId
    video_id: Optional[RecordId] = None
    timestamp: float = Field(..., ge=0, description="trigger time in seconds")
    question: str = Field(..., min_length=1)
    options: List[str]
    correct_answer: int
    question_order: Optional[int] = None

    @field_validator("options", mode="before")
    @classmethod
    def parse_options(cls, v: Any) -> Any:
        # some exports store the jsonb column as a string
        if isinstance(v, str):
            return json.loads(v)
        return v


# -- Request --

class ViewerLookupRequest(BaseModel):
    employee_number: str = Field(..., description="employee number typed on the login screen")

class OpenSessionRequest(BaseModel):
    employee_number: str

# media player progress sample, same shape as the player's onProgress payload
class ProgressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    played_seconds: float = Field(..., ge=0, alias="playedSeconds")

class AnswerRequest(BaseModel):
    answer: str = Field(..., min_length=1)


# -- Response --

class VideoResponse(BaseModel):
    id: RecordId
    video_url: Optional[str] = None
    title: Optional[str] = None

class ViewerResponse(BaseModel):
    employee_id: RecordId
    employee_number: str
    full_name: str
    video: VideoResponse

class QuestionResponse(BaseModel):
    id: RecordId
    prompt: str
    options: List[str]
    trigger_time_seconds: float
    attempts_used: int

class SessionStateResponse(BaseModel):
    session_id: str
    employee_id: RecordId
    full_name: str
    video_id: RecordId
    video_url: Optional[str] = None
    video_title: Optional[str] = None
    session_record_id: Optional[RecordId] = None
    offline: bool
    state: str
    playing: bool
    position_seconds: float
    restart_count: int
    question: Optional[QuestionResponse] = None
    wrong_answer: Optional[str] = None
    resolved_count: int
    question_count: int
    score: Optional[float] = None
    passed: Optional[bool] = None

# state after one input, plus what the player has to do
class TransitionResponse(SessionStateResponse):
    outcome: Optional[str] = None
    seek_to: Optional[float] = None
