"""
Prometheus Metrics
==================

Application metrics for monitoring and alerting.
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    multiprocess,
)

CHAT_PATH = "/api/v1/chat"

# Create a custom registry for this application
REGISTRY = CollectorRegistry()

APP_INFO = Info(
    "sql_chat",
    "Employee SQL chat application information",
    registry=REGISTRY,
)

# Chat turn metrics
CHAT_TURNS_TOTAL = Counter(
    "sql_chat_turns_total",
    "Total number of chat turns processed",
    ["outcome", "privileged"],
    registry=REGISTRY,
)

CHAT_TURN_DURATION = Histogram(
    "sql_chat_turn_duration_seconds",
    "Chat turn processing duration in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=REGISTRY,
)

STATEMENTS_TOTAL = Counter(
    "sql_chat_statements_total",
    "Statements that reached the executor, by kind",
    ["kind"],
    registry=REGISTRY,
)

REJECTIONS_TOTAL = Counter(
    "sql_chat_rejections_total",
    "Write attempts blocked for read-only callers, by pipeline stage",
    ["stage"],  # intent, validation
    registry=REGISTRY,
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=REGISTRY,
)

ACTIVE_CHATS = Gauge(
    "sql_chat_active_requests",
    "Number of chat requests currently being processed",
    registry=REGISTRY,
)

_REJECTION_STAGES = {
    "intent_rejected": "intent",
    "access_denied": "validation",
}


def setup_metrics(app: FastAPI, version: str = "0.1.0", environment: str = "development") -> None:
    """
    Set up Prometheus metrics for the FastAPI application.

    Args:
        app: FastAPI application instance
        version: Application version reported in the info metric
        environment: Deployment environment reported in the info metric
    """
    APP_INFO.info({
        "version": version,
        "environment": environment,
    })

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next: Callable) -> Response:
        """Middleware to track HTTP metrics."""
        start_time = time.perf_counter()

        is_chat_endpoint = request.url.path == CHAT_PATH
        if is_chat_endpoint:
            ACTIVE_CHATS.inc()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            HTTP_REQUESTS_TOTAL.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code,
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=request.method,
                endpoint=request.url.path,
            ).observe(duration)

            return response
        finally:
            if is_chat_endpoint:
                ACTIVE_CHATS.dec()


def track_turn_metrics(
    outcome: str,
    privileged: bool,
    duration_seconds: float,
    statement_kind: str | None = None,
) -> None:
    """
    Track metrics for a completed chat turn.

    Args:
        outcome: Pipeline outcome label
        privileged: Whether the caller was privileged
        duration_seconds: Total processing time
        statement_kind: Kind of the executed statement, if one ran
    """
    CHAT_TURNS_TOTAL.labels(outcome=outcome, privileged=str(privileged).lower()).inc()
    CHAT_TURN_DURATION.observe(duration_seconds)

    if statement_kind and outcome in ("executed", "no_data", "execution_error"):
        STATEMENTS_TOTAL.labels(kind=statement_kind).inc()

    stage = _REJECTION_STAGES.get(outcome)
    if stage:
        REJECTIONS_TOTAL.labels(stage=stage).inc()


async def metrics_endpoint(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Handle multiprocess mode if using gunicorn
    try:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        metrics = generate_latest(registry)
    except ValueError:
        # Not in multiprocess mode
        metrics = generate_latest(REGISTRY)

    return Response(
        content=metrics,
        media_type=CONTENT_TYPE_LATEST,
    )
