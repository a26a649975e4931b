"""
Activity log records.

Every record carries a details payload whose shape is fixed by its
activity_type. The union is discriminated on that tag so stored JSON
round-trips back into the right payload class.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, computed_field


class FoodItem(BaseModel):
    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class MealLoggedDetails(BaseModel):
    activity_type: Literal["meal_logged"] = "meal_logged"
    meal_type: str
    items: List[FoodItem] = Field(default_factory=list)
    total_calories: float = Field(ge=0)
    image_url: Optional[str] = None


class WaterLoggedDetails(BaseModel):
    activity_type: Literal["water_logged"] = "water_logged"
    amount: float = Field(gt=0)
    unit: str = "ml"


class GoalSetDetails(BaseModel):
    activity_type: Literal["goal_set"] = "goal_set"
    calorie_goal: float = Field(ge=0)
    protein_goal: float = Field(ge=0)
    carbs_goal: float = Field(ge=0)
    fat_goal: float = Field(ge=0)


class LoginDetails(BaseModel):
    activity_type: Literal["login"] = "login"


class SignupDetails(BaseModel):
    activity_type: Literal["signup"] = "signup"


class TaskCompletedDetails(BaseModel):
    activity_type: Literal["task_completed"] = "task_completed"
    task_id: str
    task_name: str


class StreakUpdatedDetails(BaseModel):
    activity_type: Literal["streak_updated"] = "streak_updated"
    current_streak: NonNegativeInt
    longest_streak: NonNegativeInt
    completed: bool = True


class StreakMilestoneDetails(BaseModel):
    activity_type: Literal["streak_milestone"] = "streak_milestone"
    days: int
    kind: Literal["minor", "major"]


class StreakFreezeUsedDetails(BaseModel):
    activity_type: Literal["streak_freeze_used"] = "streak_freeze_used"
    current_streak: NonNegativeInt


class StreakResetDetails(BaseModel):
    activity_type: Literal["streak_reset"] = "streak_reset"
    previous_streak: NonNegativeInt


ActivityDetails = Annotated[
    Union[
        MealLoggedDetails,
        WaterLoggedDetails,
        GoalSetDetails,
        LoginDetails,
        SignupDetails,
        TaskCompletedDetails,
        StreakUpdatedDetails,
        StreakMilestoneDetails,
        StreakFreezeUsedDetails,
        StreakResetDetails,
    ],
    Field(discriminator="activity_type"),
]


class ActivityRecord(BaseModel):
    """Immutable audit-log entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    details: ActivityDetails
    created_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def activity_type(self) -> str:
        return self.details.activity_type
