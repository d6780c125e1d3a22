from datetime import datetime
from typing import Dict, List, Optional

from supabase import create_client, Client

from app.services.errors import PersistenceWriteFailed


def _jsonable(data: Dict) -> Dict:
    # the REST client serializes with json, datetimes have to go over as ISO strings
    return {k: v.isoformat() if isinstance(v, datetime) else v for k, v in data.items()}


class SupabaseStore:
    """QuizStore over the supabase REST client."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_credentials(cls, supabase_url: str, supabase_key: str) -> "SupabaseStore":
        return cls(create_client(supabase_url, supabase_key))

    def _select(self, table: str, video_id=None) -> List[Dict]:
        query = self.client.table(table).select("*")
        if video_id is not None:
            query = query.eq("video_id", video_id)
        response = query.execute()
        return response.data if response.data else []

    def _insert(self, table: str, data: Dict) -> Dict:
        try:
            response = self.client.table(table).insert(_jsonable(data)).execute()
        except Exception as e:
            raise PersistenceWriteFailed(f"insert into {table} failed: {e}") from e
        if not response.data:
            raise PersistenceWriteFailed(f"insert into {table} returned no data")
        return response.data[0]

    # --employees / assignments--

    # employee lookup by employee number
    def find_employee_by_number(self, employee_number: str) -> Optional[Dict]:
        response = self.client.table("employees").select("*").eq("employee_number", employee_number).execute()
        return response.data[0] if response.data else None

    def list_employees(self) -> List[Dict]:
        return self._select("employees")

    # videos assigned to one employee
    def list_assigned_video_ids(self, employee_id) -> List:
        response = (
            self.client.table("employee_video_assignments")
            .select("video_id")
            .eq("employee_id", employee_id)
            .execute()
        )
        return [row["video_id"] for row in response.data] if response.data else []

    # --videos / questions--

    def get_video(self, video_id) -> Optional[Dict]:
        response = self.client.table("videos").select("*").eq("id", video_id).execute()
        return response.data[0] if response.data else None

    def list_video_questions(self, video_id) -> List[Dict]:
        response = (
            self.client.table("video_questions")
            .select("*")
            .eq("video_id", video_id)
            .order("question_order")
            .execute()
        )
        return response.data if response.data else []

    # --test_attempts (session record)--

    def create_test_attempt(self, data: Dict) -> Dict:
        return self._insert("test_attempts", data)

    def update_test_attempt(self, attempt_id, data: Dict) -> Optional[Dict]:
        try:
            response = self.client.table("test_attempts").update(_jsonable(data)).eq("id", attempt_id).execute()
        except Exception as e:
            raise PersistenceWriteFailed(f"update of test_attempts/{attempt_id} failed: {e}") from e
        return response.data[0] if response.data else None

    def list_test_attempts(self, video_id=None) -> List[Dict]:
        return self._select("test_attempts", video_id)

    # --event log--

    def insert_user_response(self, data: Dict) -> Dict:
        return self._insert("user_responses", data)

    def insert_video_restart(self, data: Dict) -> Dict:
        return self._insert("video_restarts", data)

    def insert_video_view(self, data: Dict) -> Dict:
        return self._insert("video_views", data)

    def list_user_responses(self, video_id=None) -> List[Dict]:
        return self._select("user_responses", video_id)

    def list_video_restarts(self, video_id=None) -> List[Dict]:
        return self._select("video_restarts", video_id)

    def list_video_views(self, video_id=None) -> List[Dict]:
        return self._select("video_views", video_id)
