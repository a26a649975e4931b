from typing import Optional

from fastapi import APIRouter, Depends, Query

from nutritrack.features.registry import Services, get_services

router = APIRouter()


@router.get("/v1/activities")
def list_activities(
    user_id: str = Query(..., min_length=1),
    activity_type: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    services: Services = Depends(get_services),
):
    """Activity log for the debug panel, newest first."""
    records = services.activity.for_user(user_id, activity_type=activity_type, limit=limit)
    return {"activities": [r.model_dump(mode="json") for r in records]}
