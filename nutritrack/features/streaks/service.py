from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Literal, Optional

from pydantic import ValidationError

from nutritrack.core.clock import local_day
from nutritrack.core.errors import MalformedRecordError, PersistenceError
from nutritrack.core.logging import log_event
from nutritrack.features.activity.service import ActivityLog
from nutritrack.features.storage import KeyValueStore, streak_key
from nutritrack.features.streaks.freezes import FreezeProvider
from nutritrack.features.streaks.progress import level_progress, next_milestone, streak_level
from nutritrack.models.activity import (
    ActivityDetails,
    StreakFreezeUsedDetails,
    StreakMilestoneDetails,
    StreakResetDetails,
    StreakUpdatedDetails,
)
from nutritrack.models.streak import MILESTONE_DAYS, Milestone, StreakRecord

logger = logging.getLogger("nutritrack")

GapPolicy = Literal["hold", "restart"]


class StreakService:
    """
    Daily-completion streak state machine.

    One call per user per day counts: once today is recorded as completed,
    further calls return the stored record untouched.

    gap_policy decides what a completion after a missed, unfrozen day does
    to a running streak:
    - "hold": the day is recorded but the count neither grows nor resets
    - "restart": the streak restarts at 1 from today
    """

    def __init__(
        self,
        store: KeyValueStore,
        activity_log: ActivityLog,
        freezes: FreezeProvider,
        *,
        gap_policy: GapPolicy = "hold",
    ):
        if gap_policy not in ("hold", "restart"):
            raise ValueError(f"Unknown gap policy: {gap_policy}")
        self._store = store
        self._activity = activity_log
        self._freezes = freezes
        self._gap_policy = gap_policy

    def get_record(self, user_id: str, *, now: Optional[datetime] = None) -> StreakRecord:
        return self._load(user_id, local_day(now))

    def advance(
        self,
        user_id: str,
        goal_met: bool,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[StreakRecord]:
        """
        Apply today's outcome to the user's streak.

        Returns the updated record, or None when it could not be persisted.
        """
        today = local_day(now)
        record = self._load(user_id, today)

        if record.last_completed_date is not None and record.last_completed_date >= today:
            return record

        emitted: List[ActivityDetails] = []
        use_freeze = False

        if goal_met:
            self._apply_completion(record, today, emitted)
        else:
            # Already frozen or already reset today
            if today in record.freeze_dates or (record.current_streak == 0 and record.streak_start_date == today):
                return record
            use_freeze = record.current_streak > 0 and self._freezes.has_freeze(user_id)
            if use_freeze:
                record.freeze_dates.append(today)
                emitted.append(StreakFreezeUsedDetails(current_streak=record.current_streak))
            else:
                emitted.append(StreakResetDetails(previous_streak=record.current_streak))
                record.current_streak = 0
                record.streak_start_date = today

        if not self._save(record):
            return None

        if use_freeze:
            self._freezes.consume_freeze(user_id)

        for details in emitted:
            log_event(
                "info",
                f"streak.{details.activity_type.removeprefix('streak_')}",
                user_id=user_id,
                event_type=details.activity_type,
                extra={"current_streak": record.current_streak, "day": today.isoformat()},
            )
            self._activity.record(user_id, details, now=now)

        return record

    def get_state(self, user_id: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        today = local_day(now)
        record = self._load(user_id, today)
        remaining = getattr(self._freezes, "remaining", None)
        return {
            "user_id": record.user_id,
            "current_streak": record.current_streak,
            "longest_streak": record.longest_streak,
            "streak_start_date": record.streak_start_date.isoformat(),
            "last_completed_date": record.last_completed_date.isoformat() if record.last_completed_date else None,
            "today_completed": record.last_completed_date == today,
            "level": streak_level(record.current_streak),
            "level_progress": round(level_progress(record.current_streak)),
            "next_milestone": next_milestone(record.current_streak),
            "milestones": [m.model_dump(mode="json") for m in record.milestones],
            "freezes_remaining": remaining(user_id) if callable(remaining) else None,
        }

    def history(self, user_id: str, *, days: int = 35, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Calendar of the last `days` days, oldest first."""
        today = local_day(now)
        record = self._load(user_id, today)
        completed = set(record.completed_dates)
        frozen = set(record.freeze_dates)
        milestones = {m.date: m for m in record.milestones}
        calendar = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            milestone = milestones.get(day)
            calendar.append(
                {
                    "date": day.isoformat(),
                    "completed": day in completed,
                    "frozen": day in frozen,
                    "milestone": milestone.days if milestone else None,
                }
            )
        return calendar

    # Internal helpers -------------------------------------------------
    def _apply_completion(self, record: StreakRecord, today: date, emitted: List[ActivityDetails]) -> None:
        previous = record.last_completed_date

        if today not in record.completed_dates:
            record.completed_dates.append(today)
        record.last_completed_date = today

        incremented = True
        if record.current_streak == 0:
            record.streak_start_date = today
            record.current_streak = 1
        elif previous is not None and self._is_continuous(previous, today, record.freeze_dates):
            record.current_streak += 1
        elif self._gap_policy == "restart":
            emitted.append(StreakResetDetails(previous_streak=record.current_streak))
            record.current_streak = 1
            record.streak_start_date = today
        else:
            # hold: a gap with a running streak leaves the count as it was
            incremented = False

        record.longest_streak = max(record.longest_streak, record.current_streak)

        if incremented and record.current_streak in MILESTONE_DAYS:
            milestone = Milestone.reached(today, record.current_streak)
            record.milestones.append(milestone)
            emitted.append(StreakMilestoneDetails(days=milestone.days, kind=milestone.kind))

        emitted.append(
            StreakUpdatedDetails(
                current_streak=record.current_streak,
                longest_streak=record.longest_streak,
            )
        )

    @staticmethod
    def _is_continuous(previous: date, today: date, freeze_dates: List[date]) -> bool:
        # Every day strictly between the last completion and today must be frozen
        frozen = set(freeze_dates)
        day = previous + timedelta(days=1)
        while day < today:
            if day not in frozen:
                return False
            day += timedelta(days=1)
        return True

    def _load(self, user_id: str, today: date) -> StreakRecord:
        raw = self._store.read(streak_key(user_id))
        if raw is not None:
            try:
                return StreakRecord.model_validate(raw)
            except ValidationError as exc:
                log_event(
                    "warning",
                    "streak.malformed_record",
                    user_id=user_id,
                    error_code=MalformedRecordError.code,
                    extra={"errors": exc.error_count()},
                )

        record = StreakRecord.initial(user_id, today)
        self._save(record)
        return record

    def _save(self, record: StreakRecord) -> bool:
        saved = self._store.write(streak_key(record.user_id), record.model_dump(mode="json"))
        if not saved:
            log_event("warning", "streak.write_not_confirmed", user_id=record.user_id, error_code=PersistenceError.code)
        return saved
