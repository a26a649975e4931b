"""
Append-only activity log.

Recording is best-effort telemetry: a failed write is logged and reported
as None, never raised into the caller's primary operation.
"""

import logging
import random
import string
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from nutritrack.core.logging import log_event
from nutritrack.features.storage import ACTIVITIES_KEY, KeyValueStore
from nutritrack.models.activity import (
    ActivityDetails,
    ActivityRecord,
    FoodItem,
    GoalSetDetails,
    LoginDetails,
    MealLoggedDetails,
    SignupDetails,
    TaskCompletedDetails,
    WaterLoggedDetails,
)

logger = logging.getLogger("nutritrack")

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_activity_id(now: datetime) -> str:
    """activity-<epoch ms>-<7 base36 chars>"""
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"activity-{int(now.timestamp() * 1000)}-{suffix}"


class ActivityLog:
    def __init__(self, store: KeyValueStore, *, enabled: bool = True):
        self._store = store
        self._enabled = enabled

    def record(
        self,
        user_id: str,
        details: ActivityDetails,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[ActivityRecord]:
        """Append an activity; returns the stored record, or None if it was not stored."""
        if not self._enabled:
            return None

        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.astimezone(timezone.utc)

        try:
            activity = ActivityRecord(
                id=generate_activity_id(now),
                user_id=user_id,
                details=details,
                created_at=now,
            )
            stored = self._store.append(ACTIVITIES_KEY, activity.model_dump(mode="json"))
        except Exception as exc:
            # Activity logging must never fail the primary operation
            logger.warning(
                "activity.record_failed",
                extra={"user_id": user_id, "activity_type": details.activity_type, "error_message": str(exc)},
            )
            return None

        if not stored:
            logger.warning(
                "activity.record_not_confirmed",
                extra={"user_id": user_id, "activity_type": details.activity_type},
            )
            return None

        log_event(
            "debug",
            "activity.recorded",
            user_id=user_id,
            event_type=details.activity_type,
            extra={"activity_id": activity.id},
        )
        return activity

    def for_user(
        self,
        user_id: str,
        *,
        activity_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ActivityRecord]:
        """Return the user's activities, newest first."""
        match = {"user_id": user_id}
        if activity_type:
            match["activity_type"] = activity_type
        records: List[ActivityRecord] = []
        for raw in self._store.read_list(ACTIVITIES_KEY, match=match):
            if not isinstance(raw, dict) or raw.get("user_id") != user_id:
                continue
            try:
                record = ActivityRecord.model_validate(raw)
            except ValidationError:
                logger.warning("activity.malformed_entry", extra={"user_id": user_id})
                continue
            if activity_type and record.activity_type != activity_type:
                continue
            records.append(record)

        records.sort(key=lambda r: r.created_at, reverse=True)
        if limit is not None:
            records = records[:limit]
        return records

    # Convenience recorders ---------------------------------------------
    def log_meal(
        self,
        user_id: str,
        *,
        meal_type: str,
        items: List[FoodItem],
        total_calories: float,
        image_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[ActivityRecord]:
        details = MealLoggedDetails(
            meal_type=meal_type,
            items=items,
            total_calories=total_calories,
            image_url=image_url,
        )
        return self.record(user_id, details, now=now)

    def log_water(self, user_id: str, *, amount: float, unit: str = "ml", now: Optional[datetime] = None) -> Optional[ActivityRecord]:
        return self.record(user_id, WaterLoggedDetails(amount=amount, unit=unit), now=now)

    def save_goals(
        self,
        user_id: str,
        *,
        calorie_goal: float,
        protein_goal: float,
        carbs_goal: float,
        fat_goal: float,
        now: Optional[datetime] = None,
    ) -> Optional[ActivityRecord]:
        details = GoalSetDetails(
            calorie_goal=calorie_goal,
            protein_goal=protein_goal,
            carbs_goal=carbs_goal,
            fat_goal=fat_goal,
        )
        return self.record(user_id, details, now=now)

    def log_task_completion(self, user_id: str, *, task_id: str, task_name: str, now: Optional[datetime] = None) -> Optional[ActivityRecord]:
        return self.record(user_id, TaskCompletedDetails(task_id=task_id, task_name=task_name), now=now)

    def log_login(self, user_id: str, *, now: Optional[datetime] = None) -> Optional[ActivityRecord]:
        return self.record(user_id, LoginDetails(), now=now)

    def log_signup(self, user_id: str, *, now: Optional[datetime] = None) -> Optional[ActivityRecord]:
        return self.record(user_id, SignupDetails(), now=now)
