from datetime import timedelta

import pytest

from nutritrack.features.tracking.goals import DEFAULT_GOALS, calculate_percentage, goal_progress
from nutritrack.features.tracking.models import GoalSettings, MealLog, NutritionTotals, WaterLog
from nutritrack.models.activity import FoodItem


def breakfast():
    return MealLog(
        meal_type="breakfast",
        items=[
            FoodItem(name="Oatmeal", calories=300, protein=10, carbs=54, fat=5),
            FoodItem(name="Banana", calories=105, protein=1, carbs=27, fat=0.4),
        ],
    )


class TestLoggingFlows:
    def test_meal_marks_task_and_advances_streak(self, services, day_one):
        result = services.tracking.log_meal("u1", breakfast(), now=day_one)

        assert result.activity.activity_type == "meal_logged"
        assert result.activity.details.total_calories == 405
        assert {t.id for t in result.tasks if t.completed} == {"breakfast"}
        assert result.streak.current_streak == 1

    def test_second_meal_same_day_does_not_double_count(self, services, day_one):
        services.tracking.log_meal("u1", breakfast(), now=day_one)
        result = services.tracking.log_meal(
            "u1", MealLog(meal_type="Lunch", total_calories=600), now=day_one + timedelta(hours=4)
        )

        assert result.streak.current_streak == 1
        assert {t.id for t in result.tasks if t.completed} == {"breakfast", "lunch"}

    @pytest.mark.parametrize("hour,task_id", [(9, "breakfast"), (13, "lunch"), (16, "dinner"), (22, "dinner")])
    def test_untyped_meal_marks_task_by_time_of_day(self, services, day_one, hour, task_id):
        result = services.tracking.log_meal(
            "u1", MealLog(meal_type="snack", total_calories=150), now=day_one.replace(hour=hour)
        )

        assert [t.id for t in result.tasks if t.completed] == [task_id]
        assert result.streak.current_streak == 1

    def test_meal_type_wins_over_time_of_day(self, services, day_one):
        result = services.tracking.log_meal(
            "u1", MealLog(meal_type="Breakfast", total_calories=300), now=day_one.replace(hour=19)
        )

        assert [t.id for t in result.tasks if t.completed] == ["breakfast"]

    def test_water_marks_water_task(self, services, day_one):
        result = services.tracking.log_water("u1", WaterLog(amount_ml=500), now=day_one)

        assert result.activity.details.amount == 500
        assert [t.id for t in result.tasks if t.completed] == ["water"]
        assert result.streak.current_streak == 1

    def test_goals_do_not_touch_streak(self, services, day_one):
        goals = GoalSettings(calorie_goal=1800, protein_goal=100, carbs_goal=200, fat_goal=60)

        result = services.tracking.save_goals("u1", goals, now=day_one)

        assert result.activity.activity_type == "goal_set"
        assert result.streak is None
        assert services.streaks.get_record("u1", now=day_one).current_streak == 0
        assert services.tracking.current_goals("u1") == goals

    def test_logging_on_consecutive_days(self, services, day_one):
        services.tracking.log_water("u1", WaterLog(amount_ml=250), now=day_one)
        result = services.tracking.log_water("u1", WaterLog(amount_ml=250), now=day_one + timedelta(days=1))

        assert result.streak.current_streak == 2
        assert [t.id for t in result.tasks if t.completed] == ["water"]


class TestDailySummary:
    def test_summary_uses_default_goals(self, services, day_one):
        services.tracking.log_meal("u1", breakfast(), now=day_one)

        summary = services.tracking.daily_summary("u1", now=day_one)

        assert summary["meals_logged"] == 1
        assert summary["totals"]["calories"] == 405
        assert summary["goals"] == DEFAULT_GOALS.model_dump()
        assert summary["progress"]["calories"]["percentage"] == 20
        assert summary["progress"]["calories"]["remaining"] == 1595

    def test_summary_ignores_other_days(self, services, day_one):
        services.tracking.log_meal("u1", breakfast(), now=day_one - timedelta(days=1))

        assert services.tracking.daily_summary("u1", now=day_one)["meals_logged"] == 0


@pytest.mark.parametrize(
    "current,target,expected",
    [
        (1250, 2000, 63),
        (2500, 2000, 100),
        (0, 2000, 0),
        (50, 0, 0),
        (3, 8, 38),  # half rounds up
    ],
)
def test_calculate_percentage(current, target, expected):
    assert calculate_percentage(current, target) == expected


def test_goal_progress_per_macro():
    totals = NutritionTotals(calories=1450, protein=65, carbs=180, fat=45)

    progress = goal_progress(totals, DEFAULT_GOALS)

    assert {name: p["percentage"] for name, p in progress.items()} == {
        "calories": 73,
        "protein": 54,
        "carbs": 72,
        "fat": 69,
    }
