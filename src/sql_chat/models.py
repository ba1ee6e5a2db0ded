"""
Data Models
===========

Core data structures for the employee text-to-SQL chat pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class StatementKind(Enum):
    """Kind of a SQL statement, derived from its first keyword."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    UNKNOWN = "unknown"


class Intent(Enum):
    """Coarse intent of a user utterance."""

    READ = "read"
    WRITE = "write"


class VerificationStatus(Enum):
    """Status of a verification check."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class VerificationResult:
    """Result of a single verification step."""

    verifier_name: str
    status: VerificationStatus
    message: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CandidateStatement:
    """A single SQL statement extracted from model output, not yet validated."""

    sql: str
    kind: StatementKind



@dataclass
class FormattedTable:
    """Human-readable rendering of a sequence of row images."""

    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def render(self) -> str:
        """Render as a markdown table; a table without columns renders empty."""
        if not self.headers:
            return ""
        lines = [
            "| " + " | ".join(self.headers) + " |",
            "|" + "|".join("----" for _ in self.headers) + "|",
        ]
        for row in self.rows:
            lines.append("| " + " | ".join(row) + " |")
        return "\n".join(lines) + "\n"


@dataclass
class ExecutionResult:
    """Outcome of executing one statement through the smart executor."""

    kind: StatementKind
    message: str = ""
    table: Optional[FormattedTable] = None
    rows_affected: int = 0
    error: Optional[str] = None
    # Row image captured before an UPDATE, when the preview succeeded
    before: Optional[FormattedTable] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """Text returned to the caller: message, table, or both."""
        if self.table is None:
            return self.message
        if not self.message:
            return self.table.render()
        return f"{self.message}\n{self.table.render()}"


@dataclass
class AuditEntry:
    """Single entry in the audit trail."""

    timestamp: str
    step: str
    input_data: dict
    output_data: dict
    verification_results: list[VerificationResult] = field(default_factory=list)


@dataclass
class ChatReply:
    """Reply for one chat turn."""

    response_text: str
    sql_query_used: Optional[str]
    timestamp_utc: datetime
    processing_time_ms: float


@dataclass
class PipelineResult:
    """Final result from the pipeline: the reply plus how it was produced."""

    reply: ChatReply
    outcome: str
    statement_kind: Optional[StatementKind]
    audit_trail: list[AuditEntry]


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    tokens_used: int = 0
