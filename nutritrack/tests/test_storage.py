"""Tests for the persistence facade and its adapters."""

import pytest

from nutritrack.core import database
from nutritrack.core.errors import PersistenceError
from nutritrack.features.storage import InMemoryStore, SafeStore, build_store
from nutritrack.features.storage.sql import SqlStore


class TestInMemoryStore:
    def test_absent_key_reads_none(self):
        assert InMemoryStore().read("missing") is None

    def test_values_are_copied(self):
        store = InMemoryStore()
        value = {"items": [1, 2]}
        store.write("k", value)

        value["items"].append(3)
        read = store.read("k")
        read["items"].append(4)

        assert store.read("k") == {"items": [1, 2]}

    def test_append_and_read_list(self):
        store = InMemoryStore()
        store.append("log", {"n": 1})
        store.append("log", {"n": 2})

        assert store.read_list("log") == [{"n": 1}, {"n": 2}]
        assert store.read_list("other") == []

    def test_read_list_filters_on_fields(self):
        store = InMemoryStore()
        store.append("log", {"user_id": "u1", "n": 1})
        store.append("log", {"user_id": "u2", "n": 2})
        store.append("log", "not-an-object")

        assert store.read_list("log", match={"user_id": "u2"}) == [{"user_id": "u2", "n": 2}]

    def test_unserializable_value_raises(self):
        with pytest.raises(PersistenceError):
            InMemoryStore().write("k", {"bad": object()})


class ExplodingStore:
    def read(self, key):
        raise PersistenceError("db down")

    def write(self, key, value):
        raise PersistenceError("db down")

    def append(self, key, item):
        raise PersistenceError("db down")

    def read_list(self, key, match=None):
        raise PersistenceError("db down")


class TestSafeStore:
    def test_faults_degrade(self):
        store = SafeStore(ExplodingStore())

        assert store.read("k") is None
        assert store.write("k", 1) is False
        assert store.append("k", 1) is False
        assert store.read_list("k") == []

    def test_engines_treat_outage_as_fresh_state(self, day_one):
        from nutritrack.features.activity.service import ActivityLog
        from nutritrack.features.streaks.freezes import NoFreezes
        from nutritrack.features.streaks.service import StreakService
        from nutritrack.features.tasks.service import DailyTaskScheduler

        store = SafeStore(ExplodingStore())
        log = ActivityLog(store)

        assert StreakService(store, log, NoFreezes()).advance("u1", True, now=day_one) is None
        tasks = DailyTaskScheduler(store, log).mark_completed("u1", "lunch", now=day_one)
        assert not any(t.completed for t in tasks)


@pytest.fixture
def sqlite_store(tmp_path):
    database.dispose_engine()
    database.init_engine(f"sqlite:///{tmp_path / 'nutritrack.db'}")
    yield SqlStore()
    database.dispose_engine()


class TestSqlStore:
    def test_write_then_read(self, sqlite_store):
        sqlite_store.write("streak:u1", {"current_streak": 2})
        sqlite_store.write("streak:u1", {"current_streak": 3})

        assert sqlite_store.read("streak:u1") == {"current_streak": 3}
        assert sqlite_store.read("streak:u2") is None

    def test_scalar_values(self, sqlite_store):
        sqlite_store.write("tasksLastSaved:u1", "2024-03-01")

        assert sqlite_store.read("tasksLastSaved:u1") == "2024-03-01"

    def test_append_preserves_order(self, sqlite_store):
        for n in range(3):
            sqlite_store.append("userActivities", {"n": n})

        assert sqlite_store.read_list("userActivities") == [{"n": 0}, {"n": 1}, {"n": 2}]

    def test_read_list_filters_in_query(self, sqlite_store):
        sqlite_store.append("userActivities", {"user_id": "u1", "activity_type": "login"})
        sqlite_store.append("userActivities", {"user_id": "u2", "activity_type": "login"})
        sqlite_store.append("userActivities", {"user_id": "u1", "activity_type": "water_logged"})

        matched = sqlite_store.read_list("userActivities", match={"user_id": "u1", "activity_type": "login"})

        assert matched == [{"user_id": "u1", "activity_type": "login"}]

    def test_activity_log_over_sql(self, sqlite_store):
        from nutritrack.features.activity.service import ActivityLog

        log = ActivityLog(SafeStore(sqlite_store))
        log.log_login("u1")
        log.log_water("u2", amount=300)
        log.log_water("u1", amount=250)

        assert [r.activity_type for r in log.for_user("u1", activity_type="water_logged")] == ["water_logged"]
        assert len(log.for_user("u1")) == 2

    def test_streak_engine_over_sql(self, sqlite_store, day_one):
        from datetime import timedelta

        from nutritrack.features.activity.service import ActivityLog
        from nutritrack.features.streaks.freezes import NoFreezes
        from nutritrack.features.streaks.service import StreakService

        store = SafeStore(sqlite_store)
        service = StreakService(store, ActivityLog(store), NoFreezes())
        service.advance("u1", True, now=day_one)
        record = service.advance("u1", True, now=day_one + timedelta(days=1))

        assert record.current_streak == 2
        assert service.get_record("u1", now=day_one + timedelta(days=1)).current_streak == 2


def test_build_store_memory():
    assert isinstance(build_store("memory").inner, InMemoryStore)


def test_build_store_auto_without_database(monkeypatch):
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setattr(database.settings, "DATABASE_URL", None)

    assert isinstance(build_store("auto").inner, InMemoryStore)
