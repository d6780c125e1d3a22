from typing import List

from fastapi import APIRouter, Depends

from app.deps import get_store
from app.schemas.report import EmployeeStatsResponse, VideoGoalResponse
from app.services import report_service

router = APIRouter(prefix="/api/reports", tags=["reports"])


# (1) dashboard: per employee / video answer stats
@router.get("/employees", response_model=List[EmployeeStatsResponse])
def list_employee_stats(store=Depends(get_store)):
    return report_service.employee_stats(store)


# (2) dashboard: passed / failed / incomplete for one video
@router.get("/videos/{video_id}/goal", response_model=VideoGoalResponse)
def get_video_goal(video_id: int, store=Depends(get_store)):
    return report_service.video_goal(store, video_id)
