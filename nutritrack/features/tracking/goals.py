import math
from typing import Dict, Iterable

from nutritrack.features.tracking.models import GoalSettings, NutritionTotals
from nutritrack.models.activity import FoodItem

DEFAULT_GOALS = GoalSettings(calorie_goal=2000, protein_goal=120, carbs_goal=250, fat_goal=65)


def calculate_percentage(current: float, target: float) -> int:
    """Rounded share of target reached, capped at 100."""
    if target <= 0:
        return 0
    return min(math.floor(current * 100 / target + 0.5), 100)


def totals_for(items: Iterable[FoodItem]) -> NutritionTotals:
    totals = NutritionTotals()
    for item in items:
        totals.calories += item.calories
        totals.protein += item.protein
        totals.carbs += item.carbs
        totals.fat += item.fat
    return totals


def goal_progress(totals: NutritionTotals, goals: GoalSettings) -> Dict[str, Dict[str, float]]:
    pairs = {
        "calories": (totals.calories, goals.calorie_goal),
        "protein": (totals.protein, goals.protein_goal),
        "carbs": (totals.carbs, goals.carbs_goal),
        "fat": (totals.fat, goals.fat_goal),
    }
    return {
        name: {
            "current": current,
            "target": target,
            "remaining": max(target - current, 0),
            "percentage": calculate_percentage(current, target),
        }
        for name, (current, target) in pairs.items()
    }
