# app/services/sql_store.py
"""
QuizStore over SQLAlchemy ORM models.

Every call uses its own short-lived session so event writes coming from
background tasks never share a connection with the request that queued them.
"""
from typing import Dict, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.db.session import Base
from app.models.assignment import EmployeeVideoAssignment
from app.models.employee import Employee
from app.models.test_attempt import TestAttempt
from app.models.user_response import UserResponse
from app.models.video import Video
from app.models.video_question import VideoQuestion
from app.models.video_restart import VideoRestart
from app.models.video_view import VideoView
from app.services.errors import PersistenceWriteFailed


def _row_to_dict(row) -> Dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


class SqlStore:
    def __init__(self, session_factory: sessionmaker):
        self.SessionLocal = session_factory

    def _list(self, model: Type[Base], video_id=None, order_by=None) -> List[Dict]:
        with self.SessionLocal() as db:
            query = db.query(model)
            if video_id is not None:
                query = query.filter(model.video_id == video_id)
            query = query.order_by(order_by if order_by is not None else model.id)
            return [_row_to_dict(r) for r in query.all()]

    def _insert(self, model: Type[Base], data: Dict) -> Dict:
        try:
            with self.SessionLocal() as db:
                row = model(**data)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _row_to_dict(row)
        except (SQLAlchemyError, TypeError) as e:
            raise PersistenceWriteFailed(f"insert into {model.__tablename__} failed: {e}") from e

    # ---- employees / assignments ----

    def find_employee_by_number(self, employee_number: str) -> Optional[Dict]:
        with self.SessionLocal() as db:
            row = (
                db.query(Employee)
                .filter(Employee.employee_number == employee_number)
                .first()
            )
            return _row_to_dict(row) if row else None

    def list_employees(self) -> List[Dict]:
        return self._list(Employee)

    def list_assigned_video_ids(self, employee_id) -> List:
        with self.SessionLocal() as db:
            rows = (
                db.query(EmployeeVideoAssignment.video_id)
                .filter(EmployeeVideoAssignment.employee_id == employee_id)
                .order_by(EmployeeVideoAssignment.id)
                .all()
            )
            return [r.video_id for r in rows]

    # ---- videos / questions ----

    def get_video(self, video_id) -> Optional[Dict]:
        with self.SessionLocal() as db:
            row = db.get(Video, video_id)
            return _row_to_dict(row) if row else None

    def list_video_questions(self, video_id) -> List[Dict]:
        return self._list(VideoQuestion, video_id, order_by=VideoQuestion.question_order)

    # ---- test_attempts (session record) ----

    def create_test_attempt(self, data: Dict) -> Dict:
        return self._insert(TestAttempt, data)

    def update_test_attempt(self, attempt_id, data: Dict) -> Optional[Dict]:
        try:
            with self.SessionLocal() as db:
                row = db.get(TestAttempt, attempt_id)
                if row is None:
                    return None
                for key, value in data.items():
                    setattr(row, key, value)
                db.commit()
                db.refresh(row)
                return _row_to_dict(row)
        except SQLAlchemyError as e:
            raise PersistenceWriteFailed(f"update of test_attempts/{attempt_id} failed: {e}") from e

    def list_test_attempts(self, video_id=None) -> List[Dict]:
        return self._list(TestAttempt, video_id)

    # ---- event log ----

    def insert_user_response(self, data: Dict) -> Dict:
        return self._insert(UserResponse, data)

    def insert_video_restart(self, data: Dict) -> Dict:
        return self._insert(VideoRestart, data)

    def insert_video_view(self, data: Dict) -> Dict:
        return self._insert(VideoView, data)

    def list_user_responses(self, video_id=None) -> List[Dict]:
        return self._list(UserResponse, video_id)

    def list_video_restarts(self, video_id=None) -> List[Dict]:
        return self._list(VideoRestart, video_id)

    def list_video_views(self, video_id=None) -> List[Dict]:
        return self._list(VideoView, video_id)
