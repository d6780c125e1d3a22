# app/routers/errors.py
# quiz domain error -> HTTPException, detail shaped {"message", "detail"}
from fastapi import HTTPException

from app.services.errors import (
    InvalidTransition,
    MalformedCheckpoint,
    MissingViewerIdentity,
    QuizError,
    ScheduleConflict,
    ScheduleNotFound,
    VideoNotAssigned,
)

_STATUS = {
    MissingViewerIdentity: 404,
    VideoNotAssigned: 404,
    ScheduleNotFound: 404,
    MalformedCheckpoint: 422,
    ScheduleConflict: 422,
    InvalidTransition: 409,
}


def to_http(e: QuizError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS.get(type(e), 500),
        detail={"message": e.code, "detail": str(e)},
    )
