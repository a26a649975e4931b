"""Logical key layout shared by every persistence adapter."""

ACTIVITIES_KEY = "userActivities"


def streak_key(user_id: str) -> str:
    return f"streak:{user_id}"


def tasks_key(user_id: str) -> str:
    return f"dailyTasks:{user_id}"


def tasks_last_saved_key(user_id: str) -> str:
    return f"tasksLastSaved:{user_id}"
