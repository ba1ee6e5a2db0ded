"""
Read-Only Verifier
==================

Authoritative gate for unprivileged callers: every statement in the batch
must start with a recognised read-only command.
"""

from sql_chat.config import DEFAULT_COMMAND_SETS, CommandSets
from sql_chat.models import VerificationResult, VerificationStatus
from sql_chat.normalizer import clean_sql
from sql_chat.verifiers.base import Verifier

_NON_ADMIN_NOTE = "Only SELECT queries are permitted for non-admin users."


def split_statements(sql: str) -> list[str]:
    """Clean fences/comments and split into non-empty statements."""
    return [s.strip() for s in clean_sql(sql).split(";") if s.strip()]


def leading_command(statement: str) -> str:
    """First whitespace-delimited token, uppercased."""
    return statement.split(None, 1)[0].upper()


class ReadOnlyVerifier(Verifier):
    """Classifies statements by leading command; unknown commands are untrusted."""

    def __init__(self, commands: CommandSets = DEFAULT_COMMAND_SETS) -> None:
        self.commands = commands

    @property
    def name(self) -> str:
        return "ReadOnlyVerifier"

    def is_statement_read_only(self, statement: str) -> bool:
        command = leading_command(statement)
        if command in self.commands.write_commands:
            return False
        return command in self.commands.read_commands

    def is_read_only(self, sql: str) -> bool:
        """True iff the batch is non-empty and every statement is read-only."""
        statements = split_statements(sql) if sql else []
        if not statements:
            return False
        return all(self.is_statement_read_only(s) for s in statements)

    def explain_violation(self, sql: str) -> str:
        """
        Explain why a batch is not read-only.

        Returns an empty string when there is nothing to report.
        """
        statements = split_statements(sql) if sql else []
        if not statements:
            return "Empty query is not allowed."

        for statement in statements:
            command = leading_command(statement)
            if command in self.commands.write_commands:
                return f"Write operations ({command}) are not allowed. {_NON_ADMIN_NOTE}"
            if command not in self.commands.read_commands:
                return (
                    f"Command '{command}' is not recognized as a safe read-only "
                    f"operation. {_NON_ADMIN_NOTE}"
                )

        return ""

    def offending_command(self, sql: str) -> str | None:
        for statement in split_statements(sql) if sql else []:
            if not self.is_statement_read_only(statement):
                return leading_command(statement)
        return None

    def verify(self, sql: str, context: dict) -> VerificationResult:
        """
        Verify every statement is read-only.

        Args:
            sql: SQL batch to validate
            context: Additional context (unused for this verifier)

        Returns:
            VerificationResult with PASSED or FAILED status
        """
        if self.is_read_only(sql):
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.PASSED,
                message="All statements are read-only",
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.FAILED,
            message=self.explain_violation(sql),
            details={"command": self.offending_command(sql)},
        )
