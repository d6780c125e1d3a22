# app/services/errors.py
"""
Quiz domain errors.

Schedule errors and identity errors are fatal to session creation and are
turned into HTTP responses by the routers. PersistenceWriteFailed never
reaches a router: the event emitter logs and drops it.
"""


class QuizError(Exception):
    """Base class for every quiz domain error."""

    code = "quiz_error"


class ScheduleNotFound(QuizError):
    code = "schedule_not_found"


class MalformedCheckpoint(QuizError):
    code = "malformed_checkpoint"


class ScheduleConflict(QuizError):
    code = "schedule_conflict"


class MissingViewerIdentity(QuizError):
    code = "missing_viewer_identity"


class VideoNotAssigned(QuizError):
    code = "video_not_assigned"


class InvalidTransition(QuizError):
    code = "invalid_transition"


class PersistenceWriteFailed(QuizError):
    code = "persistence_write_failed"
