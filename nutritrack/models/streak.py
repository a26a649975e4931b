from __future__ import annotations

import datetime as dt
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, NonNegativeInt, model_validator

MilestoneKind = Literal["minor", "major"]
StreakLevel = Literal["bronze", "silver", "gold"]

MILESTONE_DAYS = (7, 30, 60, 100, 365)
MAJOR_MILESTONE_DAYS = 100


class Milestone(BaseModel):
    date: dt.date
    days: int
    kind: MilestoneKind

    @classmethod
    def reached(cls, day: date, days: int) -> "Milestone":
        return cls(date=day, days=days, kind="major" if days >= MAJOR_MILESTONE_DAYS else "minor")


class StreakRecord(BaseModel):
    """
    Per-user daily-completion streak. Calendar days only, no storage concerns.
    """

    user_id: str
    current_streak: NonNegativeInt = 0
    longest_streak: NonNegativeInt = 0
    streak_start_date: date
    completed_dates: List[date] = Field(default_factory=list)
    last_completed_date: Optional[date] = None
    milestones: List[Milestone] = Field(default_factory=list)
    freeze_dates: List[date] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_invariants(self) -> "StreakRecord":
        if self.current_streak > self.longest_streak:
            raise ValueError("current_streak cannot exceed longest_streak")
        if any(earlier >= later for earlier, later in zip(self.completed_dates, self.completed_dates[1:])):
            raise ValueError("completed_dates must be strictly increasing")
        if self.last_completed_date is not None and self.completed_dates:
            if self.last_completed_date != max(self.completed_dates):
                raise ValueError("last_completed_date must be the latest completed date")
        return self

    @classmethod
    def initial(cls, user_id: str, today: date) -> "StreakRecord":
        return cls(user_id=user_id, streak_start_date=today)
