"""
Smart Executor
==============

Dispatches a validated statement by kind, captures before/after row images
around UPDATE and DELETE, and formats everything into a FormattedTable-shaped
result. The executor never raises: store and date errors come back as a
result carrying the error text, since a chat turn must always get a reply.

Previews are read on the same connection as the mutation but outside any
explicit transaction with it, so a concurrent writer can interleave between
preview and mutation. The preview is a display aid only.
"""

import re

import structlog

from sql_chat.dates import DateNormalizer
from sql_chat.errors import SqlChatError, StoreExecutionError
from sql_chat.formatting import format_rows
from sql_chat.models import ExecutionResult, FormattedTable, StatementKind
from sql_chat.normalizer import statement_kind
from sql_chat.store import EmployeeStore, StoreSession

logger = structlog.get_logger(__name__)

_YEAR_CALL = re.compile(r"YEAR\s*\(\s*([^)]+?)\s*\)\s*=\s*(\d{4})", re.IGNORECASE)
_MONTH_CALL = re.compile(r"MONTH\s*\(\s*([^)]+?)\s*\)\s*=\s*(\d{1,2})", re.IGNORECASE)

_UPDATE_SHAPE = re.compile(
    r"UPDATE\s+(\w+)\s+SET\s+.*?(\s+WHERE\s+.*?)(\s*;?\s*)$", re.IGNORECASE | re.DOTALL
)
_DELETE_SHAPE = re.compile(
    r"DELETE\s+FROM\s+(\w+)(\s+WHERE\s+.*?)(\s*;?\s*)$", re.IGNORECASE | re.DOTALL
)

UPDATE_PREVIEW_FAILED = "Could not preview affected records."
DELETE_PREVIEW_FAILED = "Could not preview records to delete."


def rewrite_for_engine(sql: str) -> str:
    """
    Rewrite date functions SQLite lacks into LIKE patterns on YYYY-MM-DD text.

    ``YEAR(col) = 2022`` becomes ``col LIKE '2022-%'`` and ``MONTH(col) = 3``
    becomes ``col LIKE '____-03-%'``.
    """
    if not sql or not sql.strip():
        return sql
    sql = _YEAR_CALL.sub(r"\1 LIKE '\2-%'", sql)
    return _MONTH_CALL.sub(lambda m: f"{m.group(1)} LIKE '____-{int(m.group(2)):02d}-%'", sql)


def update_to_select(sql: str) -> str:
    """Equivalent SELECT for an UPDATE's WHERE clause, or '' if none can be derived."""
    match = _UPDATE_SHAPE.search(sql)
    if match is None:
        return ""
    return f"SELECT * FROM {match.group(1)}{match.group(2)}"


def delete_to_select(sql: str) -> str:
    """Equivalent SELECT for a DELETE's WHERE clause, or '' if none can be derived."""
    match = _DELETE_SHAPE.search(sql)
    if match is None:
        return ""
    return f"SELECT * FROM {match.group(1)}{match.group(2)}"


class SmartExecutor:
    """Executes one statement against the employee store."""

    def __init__(self, store: EmployeeStore, date_normalizer: DateNormalizer | None = None) -> None:
        self.store = store
        self.date_normalizer = date_normalizer or DateNormalizer()

    def execute(self, sql: str) -> ExecutionResult:
        """
        Execute a statement and format the outcome.

        Args:
            sql: A single validated SQL statement

        Returns:
            ExecutionResult; on failure its ``error`` is set and its message
            carries the error text
        """
        sql = rewrite_for_engine(sql)
        kind = statement_kind(sql)

        if kind is StatementKind.UNKNOWN:
            return ExecutionResult(kind=kind, message="Unsupported query type.")

        handlers = {
            StatementKind.SELECT: self._execute_select,
            StatementKind.INSERT: self._execute_insert,
            StatementKind.UPDATE: self._execute_update,
            StatementKind.DELETE: self._execute_delete,
        }

        try:
            with self.store.session() as session:
                return handlers[kind](session, sql)
        except SqlChatError as e:
            logger.warning("statement_failed", kind=kind.value, error=str(e))
            return ExecutionResult(
                kind=kind,
                message=f"Error executing query: {e}",
                error=str(e),
            )

    def _select(self, session: StoreSession, sql: str, params=()) -> FormattedTable:
        columns, rows = session.execute_reader(sql, params)
        return format_rows(columns, rows)

    def _preview(self, session: StoreSession, select_sql: str) -> FormattedTable | None:
        """Best-effort row image; None when the derived SELECT fails."""
        try:
            return self._select(session, select_sql)
        except StoreExecutionError as e:
            logger.info("preview_failed", sql=select_sql, error=str(e))
            return None

    def _execute_select(self, session: StoreSession, sql: str) -> ExecutionResult:
        return ExecutionResult(kind=StatementKind.SELECT, table=self._select(session, sql))

    def _execute_insert(self, session: StoreSession, sql: str) -> ExecutionResult:
        sql = self.date_normalizer.normalize_insert_dates(sql)
        rows_affected, row_id = session.execute_non_query(sql)

        if rows_affected > 0 and row_id is not None:
            try:
                table = self._select(session, "SELECT * FROM Employees WHERE Id = ?", (row_id,))
            except StoreExecutionError as e:
                logger.info("inserted_row_reload_failed", row_id=row_id, error=str(e))
            else:
                return ExecutionResult(
                    kind=StatementKind.INSERT,
                    message="Successfully created new record:",
                    table=table,
                    rows_affected=rows_affected,
                )

        return ExecutionResult(
            kind=StatementKind.INSERT,
            message="Record created successfully.",
            rows_affected=rows_affected,
        )

    def _execute_update(self, session: StoreSession, sql: str) -> ExecutionResult:
        sql = self.date_normalizer.normalize_update_dates(sql)
        select_sql = update_to_select(sql)

        before = self._preview(session, select_sql) if select_sql else None

        rows_affected, _ = session.execute_non_query(sql)

        if rows_affected == 0:
            return ExecutionResult(
                kind=StatementKind.UPDATE,
                message="No records were updated. The specified record may not exist.",
                before=before,
            )

        message = f"Successfully updated {rows_affected} record(s)."
        after = self._preview(session, select_sql) if select_sql else None
        if after is None:
            if select_sql and before is None:
                message = f"{message}\n{UPDATE_PREVIEW_FAILED}"
            return ExecutionResult(
                kind=StatementKind.UPDATE,
                message=message,
                rows_affected=rows_affected,
                before=before,
            )

        return ExecutionResult(
            kind=StatementKind.UPDATE,
            message=f"{message}\n\nUpdated records:",
            table=after,
            rows_affected=rows_affected,
            before=before,
        )

    def _execute_delete(self, session: StoreSession, sql: str) -> ExecutionResult:
        select_sql = delete_to_select(sql)
        doomed = self._preview(session, select_sql) if select_sql else None

        rows_affected, _ = session.execute_non_query(sql)

        if rows_affected == 0:
            return ExecutionResult(
                kind=StatementKind.DELETE,
                message="No records were deleted. The specified record may not exist.",
            )

        message = f"Successfully deleted {rows_affected} record(s)."
        if not select_sql:
            return ExecutionResult(kind=StatementKind.DELETE, message=message, rows_affected=rows_affected)

        message = f"{message}\n\nDeleted records were:"
        if doomed is None:
            return ExecutionResult(
                kind=StatementKind.DELETE,
                message=f"{message}\n{DELETE_PREVIEW_FAILED}",
                rows_affected=rows_affected,
            )

        return ExecutionResult(
            kind=StatementKind.DELETE,
            message=message,
            table=doomed,
            rows_affected=rows_affected,
        )
