"""Inputs and results of the logging flows (meal, water, goals)."""

from typing import List, Optional

from pydantic import BaseModel, Field

from nutritrack.models.activity import ActivityRecord, FoodItem
from nutritrack.models.streak import StreakRecord
from nutritrack.models.task import DailyTask


class MealLog(BaseModel):
    meal_type: str = Field(min_length=1)
    items: List[FoodItem] = Field(default_factory=list)
    total_calories: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None

    def calories(self) -> float:
        if self.total_calories is not None:
            return self.total_calories
        return sum(item.calories for item in self.items)


class WaterLog(BaseModel):
    amount_ml: float = Field(gt=0)


class GoalSettings(BaseModel):
    calorie_goal: float = Field(gt=0)
    protein_goal: float = Field(ge=0)
    carbs_goal: float = Field(ge=0)
    fat_goal: float = Field(ge=0)


class NutritionTotals(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class TrackingResult(BaseModel):
    activity: Optional[ActivityRecord] = None
    tasks: List[DailyTask] = Field(default_factory=list)
    streak: Optional[StreakRecord] = None
