# app/services/store.py
"""
Persistence collaborator seen by the quiz.

Rows come back as plain dicts with the column names of the tables
(employees, videos, video_questions, employee_video_assignments,
test_attempts, user_responses, video_restarts, video_views). Write methods
raise PersistenceWriteFailed when the backend rejects the write.
"""
from typing import Dict, List, Optional, Protocol

from app.config import Settings


class QuizStore(Protocol):
    # -- reads --
    def find_employee_by_number(self, employee_number: str) -> Optional[Dict]: ...
    def list_employees(self) -> List[Dict]: ...
    def list_assigned_video_ids(self, employee_id) -> List: ...
    def get_video(self, video_id) -> Optional[Dict]: ...
    def list_video_questions(self, video_id) -> List[Dict]: ...
    def list_test_attempts(self, video_id=None) -> List[Dict]: ...
    def list_user_responses(self, video_id=None) -> List[Dict]: ...
    def list_video_restarts(self, video_id=None) -> List[Dict]: ...
    def list_video_views(self, video_id=None) -> List[Dict]: ...

    # -- writes --
    def create_test_attempt(self, data: Dict) -> Dict: ...
    def update_test_attempt(self, attempt_id, data: Dict) -> Optional[Dict]: ...
    def insert_user_response(self, data: Dict) -> Dict: ...
    def insert_video_restart(self, data: Dict) -> Dict: ...
    def insert_video_view(self, data: Dict) -> Dict: ...


def create_store(settings: Settings) -> QuizStore:
    """Build the backend selected by PERSISTENCE_BACKEND."""
    backend = settings.persistence_backend.lower()

    if backend == "supabase":
        from app.services.supabase_client import SupabaseStore

        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in .env")
        return SupabaseStore.from_credentials(settings.supabase_url, settings.supabase_key)

    if backend == "sql":
        from app.db.base import Base, SessionLocal, engine
        from app.services.sql_store import SqlStore

        Base.metadata.create_all(bind=engine)
        return SqlStore(SessionLocal)

    raise ValueError(f"Unknown PERSISTENCE_BACKEND: {settings.persistence_backend!r}")
