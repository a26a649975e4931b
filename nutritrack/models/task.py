"""Daily task checklist models."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

TaskKind = Literal["meal", "water", "exercise", "other"]


class DailyTask(BaseModel):
    """One logging action the user is expected to complete each day."""

    id: str = Field(min_length=1)
    name: str
    kind: TaskKind
    completed: bool = False
    # Reminder hint only; completion is never enforced against it.
    target_time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")


DEFAULT_TASKS: tuple[DailyTask, ...] = (
    DailyTask(id="breakfast", name="Log Breakfast", kind="meal", target_time="09:00"),
    DailyTask(id="lunch", name="Log Lunch", kind="meal", target_time="13:00"),
    DailyTask(id="dinner", name="Log Dinner", kind="meal", target_time="19:00"),
    DailyTask(id="water", name="Log Water Intake", kind="water"),
)


class ReminderAction(BaseModel):
    label: str
    task_id: Optional[str] = None


class Reminder(BaseModel):
    """Descriptor handed to the notification channel."""

    title: str = "Daily Task Reminder"
    message: str
    action: Optional[ReminderAction] = None
