from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nutritrack.core.errors import PersistenceError
from nutritrack.features.registry import Services, get_services

router = APIRouter()


class AdvanceRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    goal_met: bool = True


@router.get("/v1/streaks/current")
def get_current_streak(user_id: str = Query(..., min_length=1), services: Services = Depends(get_services)):
    """Return the current streak state for a user."""
    return services.streaks.get_state(user_id)


@router.get("/v1/streaks/history")
def get_streak_history(
    user_id: str = Query(..., min_length=1),
    days: int = Query(35, ge=1, le=366),
    services: Services = Depends(get_services),
):
    return {"history": services.streaks.history(user_id, days=days)}


@router.post("/v1/streaks/advance")
def advance_streak(body: AdvanceRequest, services: Services = Depends(get_services)):
    record = services.streaks.advance(body.user_id, body.goal_met)
    if record is None:
        raise PersistenceError("Streak update could not be saved")
    return {"record": record.model_dump(mode="json"), "state": services.streaks.get_state(body.user_id)}
