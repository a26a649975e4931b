from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nutritrack.core.clock import local_now
from nutritrack.features.registry import Services, get_services
from nutritrack.features.tasks.reminders import evaluate_reminders

router = APIRouter()


class CompleteTaskRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


def _dump(tasks):
    return [task.model_dump(mode="json") for task in tasks]


@router.get("/v1/tasks")
def get_tasks(user_id: str = Query(..., min_length=1), services: Services = Depends(get_services)):
    tasks = services.tasks.ensure_fresh_day(user_id)
    return {"tasks": _dump(tasks), "incomplete": sum(1 for t in tasks if not t.completed)}


@router.post("/v1/tasks/{task_id}/complete")
def complete_task(task_id: str, body: CompleteTaskRequest, services: Services = Depends(get_services)):
    tasks = services.tasks.mark_completed(body.user_id, task_id, strict=True)
    return {"tasks": _dump(tasks)}


@router.get("/v1/tasks/reminders")
def get_reminders(
    user_id: str = Query(..., min_length=1),
    hour: Optional[int] = Query(None, ge=0, le=23),
    services: Services = Depends(get_services),
):
    """Reminders due now (or at `hour`) for the user's open tasks. Read-only."""
    now = local_now()
    tasks = services.tasks.snapshot(user_id, now=now)
    reminders = evaluate_reminders(tasks, now.hour if hour is None else hour)
    return {"reminders": [r.model_dump(mode="json") for r in reminders]}
