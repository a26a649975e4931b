"""
Structured logging for nutritrack.

Every record emitted under the "nutritrack" logger carries the request_id
bound for the current request or reminder socket, plus whatever fields the
caller passed via `extra` (user_id, event_type, task_id, ...). Production
renders one JSON object per line; everything else renders a single
human-readable line with the fields appended as key=value pairs.
"""

import json
import logging
import os
import sys
from bisect import bisect_right
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

LOGGER_NAME = "nutritrack"
MAX_FIELD_CHARS = 500

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes present on every LogRecord; anything beyond these came from `extra`
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_LATENCY_EDGES_MS = (10, 100, 500, 1000)
_LATENCY_LABELS = ("<10ms", "10-100ms", "100-500ms", "500-1000ms", ">=1000ms")


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    rid = request_id_ctx_var.get()
    return default if rid is None else rid


@contextmanager
def bind_request_id(request_id: str) -> Iterator[str]:
    """Bind `request_id` for everything logged inside the block."""
    token = request_id_ctx_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_ctx_var.reset(token)


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    return _LATENCY_LABELS[bisect_right(_LATENCY_EDGES_MS, latency_ms)]


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class _StructuredFormatter(logging.Formatter):
    @staticmethod
    def timestamp(record: logging.LogRecord) -> str:
        return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")

    @staticmethod
    def fields(record: logging.LogRecord) -> Dict[str, object]:
        return {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key != "request_id" and value is not None
        }


class JsonFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, object] = {
            "timestamp": self.timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(self.fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [self.timestamp(record), record.levelname, f"[{LOGGER_NAME}]"]
        rid = getattr(record, "request_id", None)
        if rid:
            parts.append(f"[rid={rid}]")
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in self.fields(record).items())
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(env: str = "development", level: int = logging.INFO) -> logging.Logger:
    """Install the nutritrack handler, replacing any previous one."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())
    logger.handlers = [handler]
    # Keep propagating so pytest's caplog sees our records
    logger.propagate = True

    for noisy in ("uvicorn", "uvicorn.error"):
        logging.getLogger(noisy).propagate = False
    return logger


def _clip(value: object, limit: int = MAX_FIELD_CHARS) -> str:
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    return text if len(text) <= limit else f"{text[:limit]}...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
) -> None:
    """Log a domain event (streak.updated, tasks.day_reset, ...) with clipped extra fields."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    fields: Dict[str, object] = {"request_id": request_id or get_request_id(), "user_id": user_id}
    if event_type:
        fields["event_type"] = event_type
    if error_code:
        fields["error_code"] = error_code
    for key, value in (extra or {}).items():
        fields[key] = _clip(value)

    getattr(logger, level, logger.info)(msg, extra=fields)
