from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models.assignment import EmployeeVideoAssignment
from app.models.employee import Employee
from app.models.video import Video
from app.models.video_question import VideoQuestion
from app.services.checkpoint_schedule import build_schedule
from app.services.event_emitter import EventEmitter
from app.services.quiz_engine import SessionContext
from app.services.quiz_service import QuizService
from app.services.sql_store import SqlStore

TWO_QUESTIONS = [
    {"id": 1, "video_id": 1, "timestamp": 10, "question": "Q1", "options": ["A", "B"], "correct_answer": 1, "question_order": 1},
    {"id": 2, "video_id": 1, "timestamp": 20, "question": "Q2", "options": ["A", "B"], "correct_answer": 0, "question_order": 2},
]


def make_context(rows=None, viewer_id=1, video_id=1) -> SessionContext:
    """Fresh NOT_STARTED context over a validated schedule."""
    return SessionContext.create(viewer_id, video_id, build_schedule(rows or TWO_QUESTIONS, video_id))


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    """In-memory SQLite shared by every connection of the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def store(session_factory: sessionmaker) -> SqlStore:
    """SqlStore seeded with one employee, one assigned video and two questions."""
    with session_factory() as db:
        db.add(Employee(id=1, employee_number="1234", full_name="Dana Levi"))
        db.add(Employee(id=2, employee_number="5678", full_name="Noam Bar"))
        db.add(Video(id=1, video_url="/video.mp4", title="Cashier basics"))
        db.add(Video(id=2, video_url="/empty.mp4", title="No questions yet"))
        db.add(EmployeeVideoAssignment(employee_id=1, video_id=1))
        db.add(EmployeeVideoAssignment(employee_id=2, video_id=2))
        for row in TWO_QUESTIONS:
            db.add(VideoQuestion(**row))
        db.commit()
    return SqlStore(session_factory)


@pytest.fixture
def client(store: SqlStore) -> Iterator[TestClient]:
    from app import deps
    from app.main import app

    service = QuizService(store)
    emitter = EventEmitter(store)
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_quiz_service] = lambda: service
    app.dependency_overrides[deps.get_emitter] = lambda: emitter
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
