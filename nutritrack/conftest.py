# nutritrack/conftest.py
import os
from datetime import datetime

import pytest

os.environ.setdefault("ENV", "test")
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")
os.environ.setdefault("STORAGE_BACKEND", "memory")


@pytest.fixture
def store():
    """Fresh in-memory persistence facade."""
    from nutritrack.features.storage import InMemoryStore, SafeStore

    return SafeStore(InMemoryStore())


@pytest.fixture
def activity_log(store):
    from nutritrack.features.activity.service import ActivityLog

    return ActivityLog(store)


@pytest.fixture
def freezes():
    from nutritrack.features.streaks.freezes import FreezeBank

    return FreezeBank(allowance=0)


@pytest.fixture
def streaks(store, activity_log, freezes):
    from nutritrack.features.streaks.service import StreakService

    return StreakService(store, activity_log, freezes)


@pytest.fixture
def tasks(store, activity_log):
    from nutritrack.features.tasks.service import DailyTaskScheduler

    return DailyTaskScheduler(store, activity_log)


@pytest.fixture
def services(store, freezes):
    """Process-wide services over a fresh store, restored after the test."""
    from nutritrack.features.registry import build_services, set_services

    built = build_services(store, freezes=freezes)
    set_services(built)
    yield built
    set_services(None)


@pytest.fixture
def day_one():
    return datetime(2024, 3, 1, 9, 0)
