"""
Shared DB base / session factory.
engine, SessionLocal and Base live in app.db.session; importing the models here
registers every table on Base.metadata.
"""
from app.db.session import engine, SessionLocal, Base, make_engine
from app.models import (  # noqa: F401
    employee,
    video,
    video_question,
    assignment,
    test_attempt,
    user_response,
    video_restart,
    video_view,
)

__all__ = ["engine", "SessionLocal", "Base", "make_engine"]
