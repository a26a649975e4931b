from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from nutritrack.core.clock import local_day
from nutritrack.core.errors import MalformedRecordError, UnknownTaskError
from nutritrack.core.logging import log_event
from nutritrack.features.activity.service import ActivityLog
from nutritrack.features.storage import KeyValueStore, tasks_key, tasks_last_saved_key
from nutritrack.models.task import DEFAULT_TASKS, DailyTask

logger = logging.getLogger("nutritrack")

_task_list = TypeAdapter(List[DailyTask])


class DailyTaskScheduler:
    """
    Owns each user's checklist for the current calendar day.

    The list is reset to incomplete the first time it is touched on a new
    day, detected through a per-user "last saved day" marker. Completing a
    task records an activity but never touches the streak; pairing the two
    is the caller's decision.
    """

    def __init__(
        self,
        store: KeyValueStore,
        activity_log: ActivityLog,
        *,
        default_tasks: Iterable[DailyTask] = DEFAULT_TASKS,
    ):
        self._store = store
        self._activity = activity_log
        self._default_tasks = tuple(default_tasks)

    def ensure_fresh_day(self, user_id: str, *, now: Optional[datetime] = None) -> List[DailyTask]:
        today = local_day(now).isoformat()
        marker = self._store.read(tasks_last_saved_key(user_id))
        tasks = self._read_tasks(user_id)

        if tasks is not None and marker == today:
            return tasks

        if marker is not None and marker != today:
            log_event("info", "tasks.day_reset", user_id=user_id, extra={"previous_day": marker, "day": today})

        tasks = self._fresh_tasks()
        self._write_tasks(user_id, tasks)
        self._store.write(tasks_last_saved_key(user_id), today)
        return tasks

    def get_tasks(self, user_id: str, *, now: Optional[datetime] = None) -> List[DailyTask]:
        return self.ensure_fresh_day(user_id, now=now)

    def incomplete_tasks(self, user_id: str, *, now: Optional[datetime] = None) -> List[DailyTask]:
        return [task for task in self.ensure_fresh_day(user_id, now=now) if not task.completed]

    def snapshot(self, user_id: str, *, now: Optional[datetime] = None) -> List[DailyTask]:
        """Today's tasks without writing anything; a stale day reads as all incomplete."""
        today = local_day(now).isoformat()
        tasks = self._read_tasks(user_id)
        if tasks is None or self._store.read(tasks_last_saved_key(user_id)) != today:
            return self._fresh_tasks()
        return tasks

    def mark_completed(
        self,
        user_id: str,
        task_id: str,
        *,
        now: Optional[datetime] = None,
        strict: bool = False,
    ) -> List[DailyTask]:
        """
        Mark a task done for today. Repeat calls are no-ops.

        An id outside today's list leaves the list untouched; with strict=True
        it raises UnknownTaskError instead.
        """
        tasks = self.ensure_fresh_day(user_id, now=now)
        task = next((t for t in tasks if t.id == task_id), None)

        if task is None:
            logger.warning("tasks.unknown_task", extra={"user_id": user_id, "task_id": task_id})
            if strict:
                raise UnknownTaskError(f"Unknown task: {task_id}")
            return tasks

        if task.completed:
            return tasks

        task.completed = True
        if not self._write_tasks(user_id, tasks):
            task.completed = False
            return tasks

        log_event("info", "tasks.completed", user_id=user_id, extra={"task_id": task_id})
        self._activity.log_task_completion(user_id, task_id=task.id, task_name=task.name, now=now)
        return tasks

    def reset_daily_tasks(self, user_id: str, *, now: Optional[datetime] = None) -> List[DailyTask]:
        tasks = self._fresh_tasks()
        self._write_tasks(user_id, tasks)
        self._store.write(tasks_last_saved_key(user_id), local_day(now).isoformat())
        return tasks

    # Internal helpers -------------------------------------------------
    def _fresh_tasks(self) -> List[DailyTask]:
        return [task.model_copy(update={"completed": False}) for task in self._default_tasks]

    def _read_tasks(self, user_id: str) -> Optional[List[DailyTask]]:
        raw = self._store.read(tasks_key(user_id))
        if raw is None:
            return None
        try:
            return _task_list.validate_python(raw)
        except ValidationError:
            log_event("warning", "tasks.malformed_record", user_id=user_id, error_code=MalformedRecordError.code)
            return None

    def _write_tasks(self, user_id: str, tasks: List[DailyTask]) -> bool:
        return self._store.write(tasks_key(user_id), _task_list.dump_python(tasks, mode="json"))
