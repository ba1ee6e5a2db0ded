"""
Single Statement Verifier
=========================

Ensures exactly one statement reaches the executor per request.
"""

from sql_chat.models import VerificationResult, VerificationStatus
from sql_chat.verifiers.base import Verifier
from sql_chat.verifiers.read_only import split_statements


class SingleStatementVerifier(Verifier):
    """Rejects multi-statement batches."""

    @property
    def name(self) -> str:
        return "SingleStatementVerifier"

    def verify(self, sql: str, context: dict) -> VerificationResult:
        statements = split_statements(sql) if sql else []

        if len(statements) > 1:
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.FAILED,
                message=(
                    f"Multiple statements are not allowed: found {len(statements)}. "
                    "Please ask for one operation at a time."
                ),
                details={"statement_count": len(statements)},
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message="Single statement",
            details={"statement_count": len(statements)},
        )
