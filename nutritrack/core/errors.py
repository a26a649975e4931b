"""
Error taxonomy and the FastAPI handlers that render it.

Every error response has the same envelope:

    {"error": {"code", "message", "request_id"}, "detail": message}

and echoes the request id in the x-request-id header.
"""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from nutritrack.core.logging import LOGGER_NAME, get_request_id

logger = logging.getLogger(LOGGER_NAME)

_HTTP_CODES = {400: "bad_request", 404: "not_found", 405: "method_not_allowed", 422: "validation_error"}


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.status_code = status_code or self.status_code
        self.request_id = request_id


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class UnknownTaskError(NotFoundError):
    """The task id is not one of today's tasks."""

    code = "unknown_task"


class PersistenceError(AppError):
    """A storage adapter could not complete a read or write."""

    code = "persistence_unavailable"
    status_code = 503


class MalformedRecordError(AppError):
    """A stored record no longer decodes into its model. Never sent to clients."""

    code = "malformed_record"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid4())


def error_body(code: str, message: str, request_id: Optional[str]) -> dict:
    return {"error": {"code": code, "message": message, "request_id": request_id}, "detail": message}


def _json_error(status_code: int, code: str, message: str, rid: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, message, rid),
        headers={"x-request-id": rid},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    rid = exc.request_id or _request_id(request)
    logger.log(
        logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return _json_error(exc.status_code, exc.code, exc.message, rid)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    rid = _request_id(request)
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    return _json_error(exc.status_code, code, str(exc.detail or "HTTP error"), rid)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    rid = _request_id(request)
    logger.error("unhandled.exception", exc_info=exc, extra={"request_id": rid, "error_code": "internal_error"})
    return _json_error(500, "internal_error", "Unexpected error", rid)
