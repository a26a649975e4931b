"""
Time-of-day reminder rules and the periodic loop that delivers them.

evaluate_reminders is pure: (hour, task snapshot) -> reminder descriptors.
ReminderLoop only reads task snapshots, so it can never race a completion.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from nutritrack.core.clock import local_now
from nutritrack.models.task import DailyTask, Reminder, ReminderAction

logger = logging.getLogger("nutritrack")

# (task id, opening hour, message, action label)
TASK_REMINDER_RULES = (
    (
        "breakfast",
        10,
        "Don't forget to log your breakfast! Starting your day with tracking helps build healthy habits.",
        "Log Breakfast",
    ),
    (
        "lunch",
        14,
        "Lunch tracking reminder! Keep up with your nutrition goals by logging your meal.",
        "Log Lunch",
    ),
    (
        "dinner",
        20,
        "Don't forget to log your dinner! Complete your day's nutrition tracking.",
        "Log Dinner",
    ),
    (
        "water",
        12,
        "Staying hydrated is key to your health goals! Don't forget to log your water intake.",
        "Log Water",
    ),
)
SUMMARY_HOUR = 21


def evaluate_reminders(tasks: Sequence[DailyTask], hour: int) -> List[Reminder]:
    if not 0 <= hour <= 23:
        raise ValueError("hour must be between 0 and 23")

    by_id = {task.id: task for task in tasks}
    reminders: List[Reminder] = []

    for task_id, opens_at, message, label in TASK_REMINDER_RULES:
        task = by_id.get(task_id)
        if task is None or task.completed or hour < opens_at:
            continue
        reminders.append(Reminder(message=message, action=ReminderAction(label=label, task_id=task_id)))

    if hour >= SUMMARY_HOUR:
        incomplete = [task for task in tasks if not task.completed]
        if incomplete:
            reminders.append(
                Reminder(
                    message=f"You have {len(incomplete)} incomplete tasks today. It's not too late to track them!",
                    action=ReminderAction(label="View Tasks"),
                )
            )

    return reminders


Deliver = Callable[[Reminder], Union[None, Awaitable[None]]]


class ReminderLoop:
    """
    Periodic reminder evaluation bound to one user session.

    Evaluates once on start, then every `interval` seconds, until stop()
    is called or the `async with` block exits.
    """

    def __init__(
        self,
        scheduler,
        user_id: str,
        deliver: Deliver,
        *,
        interval: Optional[float] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        if interval is None:
            from nutritrack.core.config import settings

            interval = settings.REMINDER_INTERVAL_SECONDS
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._scheduler = scheduler
        self._user_id = user_id
        self._deliver = deliver
        self._interval = interval
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("reminders.started", extra={"user_id": self._user_id, "interval": self._interval})

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("reminders.stopped", extra={"user_id": self._user_id})

    async def __aenter__(self) -> "ReminderLoop":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def check_once(self) -> List[Reminder]:
        now = self._clock()
        # Store reads may hit the database; keep them off the event loop
        tasks = await asyncio.to_thread(self._scheduler.snapshot, self._user_id, now=now)
        reminders = evaluate_reminders(tasks, now.hour)
        for reminder in reminders:
            try:
                result = self._deliver(reminder)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "reminders.delivery_failed",
                    extra={"user_id": self._user_id, "error_message": str(exc)},
                )
        return reminders

    async def _run(self) -> None:
        while True:
            try:
                await self.check_once()
            except Exception:
                logger.exception("reminders.check_failed", extra={"user_id": self._user_id})
            await asyncio.sleep(self._interval)
