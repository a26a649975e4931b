"""Per-request correlation id and the request.complete access log line."""

import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from nutritrack.core.logging import LOGGER_NAME, bind_request_id, latency_bucket_ms

REQUEST_ID_HEADER = "x-request-id"

logger = logging.getLogger(LOGGER_NAME)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's x-request-id (or mint one) and bind it for the request."""

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = rid

        started = time.perf_counter()
        with bind_request_id(rid):
            response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[self.header_name] = rid
        logger.info(
            "request.complete",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "user_id": request.query_params.get("user_id"),
                "status": response.status_code,
                "latency_bucket": latency_bucket_ms(elapsed_ms),
            },
        )
        return response
