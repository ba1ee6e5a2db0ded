"""
API Schemas
===========

Pydantic models for API request/response validation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for one chat turn."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Natural language request about the employee data",
        examples=["Show me all employees in Engineering"],
    )
    include_audit: bool = Field(
        default=False,
        description="Include full audit trail in response",
    )


class VerificationStatusEnum(str, Enum):
    """Verification result status."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class VerificationResultResponse(BaseModel):
    """Single verification result."""

    verifier_name: str = Field(..., description="Name of the verifier")
    status: VerificationStatusEnum = Field(..., description="Verification status")
    message: str = Field(..., description="Verification message")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional details")


class AuditEntryResponse(BaseModel):
    """Single audit trail entry."""

    timestamp: str = Field(..., description="ISO 8601 timestamp")
    step: str = Field(..., description="Step identifier")
    input_data: dict[str, Any] = Field(default_factory=dict)
    output_data: dict[str, Any] = Field(default_factory=dict)
    verification_results: list[VerificationResultResponse] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Reply for one chat turn."""

    response: str = Field(..., description="Reply text: a table, a summary or an explanation")
    sql_query: str | None = Field(None, description="SQL statement used, if any")
    created_at: datetime = Field(..., description="UTC time the reply was produced")
    processing_time_ms: float = Field(..., description="Processing time in milliseconds")
    request_id: str = Field(..., description="Unique request identifier")
    audit_trail: list[AuditEntryResponse] | None = Field(
        None,
        description="Full audit trail (if requested)",
    )


class HistoryEntry(BaseModel):
    """One recorded chat turn."""

    message: str
    response: str
    sql_query: str | None = None
    created_at: str = Field(..., description="ISO 8601 timestamp")


class HistoryResponse(BaseModel):
    """A caller's recent chat turns, newest first."""

    caller_id: str
    entries: list[HistoryEntry] = Field(default_factory=list)


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual component health checks",
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(..., description="Whether the service is ready to handle requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    request_id: str | None = Field(None, description="Request ID if available")
    details: dict[str, Any] | None = Field(None, description="Additional error details")
