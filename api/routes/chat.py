"""
Chat Routes
===========

Main API endpoints: one chat turn, and the caller's transcript.
"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from api.dependencies import get_pipeline, get_transcript
from api.schemas import (
    AuditEntryResponse,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HistoryEntry,
    HistoryResponse,
    VerificationResultResponse,
    VerificationStatusEnum,
)
from observability.logging_config import bind_context, get_logger
from observability.metrics import track_turn_metrics
from observability.tracing import get_tracer
from security.auth import Caller, get_caller
from sql_chat.pipeline import ChatPipeline
from sql_chat.transcript import TranscriptLog

router = APIRouter(prefix="/api/v1", tags=["Chat"])

logger = get_logger(__name__)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Answer a question about the employee data",
    description=(
        "Translates the message to SQL, checks it against the caller's privileges, "
        "executes it and returns the formatted result"
    ),
)
def chat(
    body: ChatRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    caller: Caller = Depends(get_caller),
    pipeline: ChatPipeline = Depends(get_pipeline),
    transcript: TranscriptLog = Depends(get_transcript),
) -> ChatResponse:
    """
    Process one chat turn.

    The endpoint:
    1. Resolves the caller and their privilege
    2. Runs the chat pipeline inside a trace span
    3. Schedules the transcript write after the response is sent
    4. Returns the reply, optionally with the audit trail
    """
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    bind_context(caller_id=caller.caller_id)

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("chat_turn") as span:
        span.set_attribute("chat.privileged", caller.privileged)
        result = pipeline.process(body.message, caller.privileged)
        request.state.chat_outcome = result.outcome
        span.set_attribute("chat.outcome", result.outcome)
        if result.statement_kind is not None:
            span.set_attribute("chat.statement_kind", result.statement_kind.value)

    reply = result.reply
    track_turn_metrics(
        outcome=result.outcome,
        privileged=caller.privileged,
        duration_seconds=reply.processing_time_ms / 1000,
        statement_kind=result.statement_kind.value if result.statement_kind else None,
    )
    logger.info(
        "chat_turn_completed",
        outcome=result.outcome,
        privileged=caller.privileged,
        processing_time_ms=round(reply.processing_time_ms, 2),
    )

    background_tasks.add_task(
        transcript.record,
        caller.caller_id,
        body.message,
        reply.response_text,
        reply.sql_query_used,
    )

    audit_trail = None
    if body.include_audit:
        audit_trail = [
            AuditEntryResponse(
                timestamp=entry.timestamp,
                step=entry.step,
                input_data=entry.input_data,
                output_data=entry.output_data,
                verification_results=[
                    VerificationResultResponse(
                        verifier_name=vr.verifier_name,
                        status=VerificationStatusEnum(vr.status.value),
                        message=vr.message,
                        details=vr.details,
                    )
                    for vr in entry.verification_results
                ],
            )
            for entry in result.audit_trail
        ]

    return ChatResponse(
        response=reply.response_text,
        sql_query=reply.sql_query_used,
        created_at=reply.timestamp_utc,
        processing_time_ms=reply.processing_time_ms,
        request_id=request_id,
        audit_trail=audit_trail,
    )


@router.get(
    "/chat/history",
    response_model=HistoryResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid API key"}},
    summary="Recent chat turns for the caller",
)
def chat_history(
    limit: int = Query(20, ge=1, le=100),
    caller: Caller = Depends(get_caller),
    transcript: TranscriptLog = Depends(get_transcript),
) -> HistoryResponse:
    entries = transcript.recent(caller.caller_id, limit)
    return HistoryResponse(
        caller_id=caller.caller_id,
        entries=[HistoryEntry(**entry) for entry in entries],
    )
