"""
WebSocket that pushes daily task reminders for one user session.

Read-only socket: the reminder loop lives exactly as long as the
connection and is cancelled when the client goes away.
"""

from uuid import uuid4

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from nutritrack.core.errors import ValidationError, error_body
from nutritrack.core.logging import bind_request_id, log_event
from nutritrack.features.registry import get_services
from nutritrack.features.tasks.reminders import ReminderLoop
from nutritrack.models.task import Reminder

router = APIRouter()


@router.websocket("/v1/ws/reminders")
async def reminders_socket(websocket: WebSocket):
    user_id = websocket.query_params.get("user_id")
    request_id = websocket.headers.get("x-request-id") or str(uuid4())
    await websocket.accept()

    if not user_id:
        await websocket.send_json({"type": "error", **error_body(ValidationError.code, "user_id is required", request_id)})
        await websocket.close(code=1008)
        return

    async def deliver(reminder: Reminder) -> None:
        await websocket.send_json({"type": "reminder", "payload": reminder.model_dump(mode="json")})

    services = get_services()
    # The loop task copies this context, so its log lines carry the socket's request id
    with bind_request_id(request_id):
        log_event("info", "ws.reminders_connected", user_id=user_id)
        async with ReminderLoop(services.tasks, user_id, deliver):
            try:
                # Client messages are ignored; receiving just detects disconnects
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                log_event("info", "ws.reminders_disconnected", user_id=user_id)
