"""
Logging flows that tie the three engines together.

This is the orchestrating caller: it records the activity, marks the
matching daily task, and advances the streak. The task scheduler and the
streak engine stay unaware of each other.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from nutritrack.core.clock import local_day, local_now
from nutritrack.features.activity.service import ActivityLog
from nutritrack.features.streaks.service import StreakService
from nutritrack.features.tasks.service import DailyTaskScheduler
from nutritrack.features.tracking.goals import DEFAULT_GOALS, goal_progress, totals_for
from nutritrack.features.tracking.models import GoalSettings, MealLog, NutritionTotals, TrackingResult, WaterLog
from nutritrack.models.activity import GoalSetDetails, MealLoggedDetails

MEAL_TASKS = {"breakfast", "lunch", "dinner"}

# (before hour, task) for meals whose type names no task
MEAL_HOURS = ((11, "breakfast"), (16, "lunch"))


def meal_task_for(meal_type: str, hour: int) -> str:
    """The meal task a logged meal completes: its own type if that is a task, else by time of day."""
    task_id = meal_type.lower()
    if task_id in MEAL_TASKS:
        return task_id
    for before, candidate in MEAL_HOURS:
        if hour < before:
            return candidate
    return "dinner"


class TrackingService:
    def __init__(self, activity_log: ActivityLog, tasks: DailyTaskScheduler, streaks: StreakService):
        self._activity = activity_log
        self._tasks = tasks
        self._streaks = streaks

    def log_meal(self, user_id: str, meal: MealLog, *, now: Optional[datetime] = None) -> TrackingResult:
        activity = self._activity.log_meal(
            user_id,
            meal_type=meal.meal_type,
            items=meal.items,
            total_calories=meal.calories(),
            image_url=meal.image_url,
            now=now,
        )
        task_id = meal_task_for(meal.meal_type, local_now(now).hour)
        tasks = self._tasks.mark_completed(user_id, task_id, now=now)
        streak = self._streaks.advance(user_id, True, now=now)
        return TrackingResult(activity=activity, tasks=tasks, streak=streak)

    def log_water(self, user_id: str, water: WaterLog, *, now: Optional[datetime] = None) -> TrackingResult:
        activity = self._activity.log_water(user_id, amount=water.amount_ml, unit="ml", now=now)
        tasks = self._tasks.mark_completed(user_id, "water", now=now)
        streak = self._streaks.advance(user_id, True, now=now)
        return TrackingResult(activity=activity, tasks=tasks, streak=streak)

    def save_goals(self, user_id: str, goals: GoalSettings, *, now: Optional[datetime] = None) -> TrackingResult:
        # Goals are audit-only; they never feed the streak
        activity = self._activity.save_goals(
            user_id,
            calorie_goal=goals.calorie_goal,
            protein_goal=goals.protein_goal,
            carbs_goal=goals.carbs_goal,
            fat_goal=goals.fat_goal,
            now=now,
        )
        return TrackingResult(activity=activity)

    def current_goals(self, user_id: str) -> GoalSettings:
        latest = self._activity.for_user(user_id, activity_type="goal_set", limit=1)
        if not latest or not isinstance(latest[0].details, GoalSetDetails):
            return DEFAULT_GOALS
        details = latest[0].details
        return GoalSettings(
            calorie_goal=details.calorie_goal,
            protein_goal=details.protein_goal,
            carbs_goal=details.carbs_goal,
            fat_goal=details.fat_goal,
        )

    def daily_summary(self, user_id: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Today's intake against the user's latest goals."""
        today = local_day(now)
        totals = NutritionTotals()
        meals = 0
        for record in self._activity.for_user(user_id, activity_type="meal_logged"):
            if local_day(record.created_at) != today or not isinstance(record.details, MealLoggedDetails):
                continue
            meals += 1
            item_totals = totals_for(record.details.items)
            totals.calories += record.details.total_calories
            totals.protein += item_totals.protein
            totals.carbs += item_totals.carbs
            totals.fat += item_totals.fat

        goals = self.current_goals(user_id)
        return {
            "date": today.isoformat(),
            "meals_logged": meals,
            "totals": totals.model_dump(),
            "goals": goals.model_dump(),
            "progress": goal_progress(totals, goals),
        }
