from fastapi import APIRouter, Depends

from app.deps import get_store
from app.routers.errors import to_http
from app.schemas.quiz import ViewerLookupRequest, ViewerResponse
from app.services.errors import QuizError
from app.services.viewer_service import resolve_viewer

router = APIRouter(prefix="/api/viewers", tags=["viewers"])


# employee number -> employee + assigned video
@router.post("/lookup", response_model=ViewerResponse)
def lookup_viewer(payload: ViewerLookupRequest, store=Depends(get_store)):
    try:
        viewer = resolve_viewer(store, payload.employee_number)
    except QuizError as e:
        raise to_http(e)

    return {
        "employee_id": viewer.employee_id,
        "employee_number": viewer.employee_number,
        "full_name": viewer.full_name,
        "video": viewer.video,
    }
