"""
Base Verifier Classes
=====================

Abstract base class and verification chain implementation.
"""

from abc import ABC, abstractmethod

from sql_chat.models import VerificationResult, VerificationStatus


class Verifier(ABC):
    """Base class for all verifiers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this verifier."""
        pass

    @abstractmethod
    def verify(self, sql: str, context: dict) -> VerificationResult:
        """
        Verify the SQL against this verifier's rules.

        Args:
            sql: The SQL statement to verify
            context: Additional context (privilege, original utterance, etc.)

        Returns:
            VerificationResult indicating pass/fail with details
        """
        pass


class VerificationChain:
    """Runs verifiers in sequence, stopping at the first failure."""

    def __init__(self, verifiers: list[Verifier] | None = None) -> None:
        """
        Initialize the verification chain.

        Args:
            verifiers: List of verifiers to run. Defaults to the read-only chain.
        """
        if verifiers is not None:
            self.verifiers = verifiers
        else:
            # Lazy import to avoid circular imports
            from sql_chat.verifiers.read_only import ReadOnlyVerifier
            from sql_chat.verifiers.statement import SingleStatementVerifier

            self.verifiers = [
                SingleStatementVerifier(),
                ReadOnlyVerifier(),
            ]

    @classmethod
    def for_privilege(cls, privileged: bool) -> "VerificationChain":
        """Chain used for a caller: privileged callers skip the read-only gate."""
        if privileged:
            from sql_chat.verifiers.statement import SingleStatementVerifier

            return cls([SingleStatementVerifier()])
        return cls()

    def run(self, sql: str, context: dict) -> tuple[bool, list[VerificationResult]]:
        """
        Run all verifiers. Returns (all_passed, results).

        Args:
            sql: The SQL statement to verify
            context: Additional context for verification

        Returns:
            Tuple of (success, list of verification results)
        """
        results = []

        for verifier in self.verifiers:
            result = verifier.verify(sql, context)
            results.append(result)

            if result.status == VerificationStatus.FAILED:
                return False, results

        return True, results
