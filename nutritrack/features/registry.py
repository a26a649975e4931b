"""Process-wide service instances used by the API routes."""

from dataclasses import dataclass
from typing import Optional

from nutritrack.core.config import settings
from nutritrack.features.activity.service import ActivityLog
from nutritrack.features.storage import KeyValueStore, get_store
from nutritrack.features.streaks.freezes import FreezeBank, default_freeze_bank
from nutritrack.features.streaks.service import StreakService
from nutritrack.features.tasks.service import DailyTaskScheduler
from nutritrack.features.tracking.service import TrackingService


@dataclass
class Services:
    store: KeyValueStore
    activity: ActivityLog
    freezes: FreezeBank
    streaks: StreakService
    tasks: DailyTaskScheduler
    tracking: TrackingService


def build_services(store: Optional[KeyValueStore] = None, *, freezes: Optional[FreezeBank] = None) -> Services:
    store = store if store is not None else get_store()
    activity = ActivityLog(store, enabled=settings.ACTIVITY_LOG_ENABLED)
    freezes = freezes if freezes is not None else default_freeze_bank()
    streaks = StreakService(store, activity, freezes, gap_policy=settings.STREAK_GAP_POLICY.lower())
    tasks = DailyTaskScheduler(store, activity)
    return Services(
        store=store,
        activity=activity,
        freezes=freezes,
        streaks=streaks,
        tasks=tasks,
        tracking=TrackingService(activity, tasks, streaks),
    )


_services: Optional[Services] = None


def get_services() -> Services:
    global _services
    if _services is None:
        _services = build_services()
    return _services


def set_services(services: Optional[Services]) -> None:
    """Swap the process-wide services. FOR TESTING ONLY."""
    global _services
    _services = services
