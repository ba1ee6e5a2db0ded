"""
Errors
======

Error taxonomy for the checking, repair and execution pipeline.
"""

from typing import Optional


class SqlChatError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(SqlChatError):
    """Statement violates the read-only policy for the caller."""

    def __init__(self, message: str, command: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message)
        self.command = command
        self.sql = sql


class DateFormatError(SqlChatError):
    """A date literal could not be coerced to YYYY-MM-DD."""

    def __init__(self, literal: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Invalid date format: '{literal}'. Must be yyyy-mm-dd format."
        )
        self.literal = literal


class RepairUnresolvable(SqlChatError):
    """INSERT column/value arity is too broken to align."""


class StoreExecutionError(SqlChatError):
    """Any fault raised by the persistence layer."""


class TranslationError(SqlChatError):
    """The translator could not produce output (transport failure or timeout)."""
