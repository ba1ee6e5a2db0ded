"""
Telemetry Middleware
====================

Correlation IDs, timing and a per-request completion event carrying the
caller and chat outcome resolved further down the stack.
"""

import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from observability.logging_config import bind_context, clear_context, get_logger

REQUEST_ID_HEADER = "X-Request-ID"
OUTCOME_HEADER = "X-Chat-Outcome"

# Probes and scrapes are too frequent to log
_QUIET_PATHS = frozenset({"/health", "/ready", "/live", "/metrics"})

logger = get_logger(__name__)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """
    Request correlation for the chat service.

    Every response carries X-Request-ID and X-Response-Time-Ms. Chat turns
    also carry X-Chat-Outcome, taken from ``request.state.chat_outcome`` as
    set by the chat route. The caller is read from ``request.state.caller``,
    set by API key authentication.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        clear_context()
        bind_context(request_id=request_id, path=request.url.path)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        outcome = getattr(request.state, "chat_outcome", None)
        caller = getattr(request.state, "caller", None)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        if outcome is not None:
            response.headers[OUTCOME_HEADER] = outcome

        if request.url.path not in _QUIET_PATHS:
            logger.info(
                "request_completed",
                method=request.method,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                caller_id=caller.caller_id if caller is not None else None,
                outcome=outcome,
            )

        return response
