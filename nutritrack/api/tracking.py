from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from nutritrack.features.registry import Services, get_services
from nutritrack.features.tracking.models import GoalSettings, MealLog, WaterLog

router = APIRouter()


class MealLogRequest(MealLog):
    user_id: str = Field(..., min_length=1)


class WaterLogRequest(WaterLog):
    user_id: str = Field(..., min_length=1)


class GoalSettingsRequest(GoalSettings):
    user_id: str = Field(..., min_length=1)


@router.post("/v1/tracking/meals")
def log_meal(body: MealLogRequest, services: Services = Depends(get_services)):
    meal = MealLog.model_validate(body.model_dump(exclude={"user_id"}))
    result = services.tracking.log_meal(body.user_id, meal)
    return result.model_dump(mode="json")


@router.post("/v1/tracking/water")
def log_water(body: WaterLogRequest, services: Services = Depends(get_services)):
    result = services.tracking.log_water(body.user_id, WaterLog(amount_ml=body.amount_ml))
    return result.model_dump(mode="json")


@router.post("/v1/tracking/goals")
def save_goals(body: GoalSettingsRequest, services: Services = Depends(get_services)):
    goals = GoalSettings.model_validate(body.model_dump(exclude={"user_id"}))
    result = services.tracking.save_goals(body.user_id, goals)
    return result.model_dump(mode="json")


@router.get("/v1/tracking/summary")
def daily_summary(user_id: str = Query(..., min_length=1), services: Services = Depends(get_services)):
    return services.tracking.daily_summary(user_id)
