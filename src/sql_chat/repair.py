"""
Statement Repairer
==================

Restores the column/value arity invariant of INSERT statements emitted by
the translator. Repairs are conservative and visible in the result: a
name-only insert or an 'Unknown' row signals that the request degraded.
"""

import re

import structlog

from sql_chat.errors import RepairUnresolvable

logger = structlog.get_logger(__name__)

_INSERT_PATTERN = re.compile(
    r"INSERT\s+INTO\s+Employees\s*\(([^)]+)\)\s*VALUES\s*\(([^)]*)\)",
    re.IGNORECASE,
)

PLACEHOLDER_INSERT = "INSERT INTO Employees (Name) VALUES ('Unknown')"


def split_columns(columns_text: str) -> list[str]:
    """Split a parenthesised column list on commas."""
    return [c.strip() for c in columns_text.split(",") if c.strip()]


def split_values(values_text: str) -> list[str]:
    """
    Split a VALUES list on commas that sit outside quoted literals.

    Single- and double-quoted literals are tracked so that commas inside
    string values are kept. Quotes are preserved in the returned items.
    """
    values: list[str] = []
    current: list[str] = []
    quote = None

    for ch in values_text:
        if quote is None and ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif quote is not None and ch == quote:
            quote = None
            current.append(ch)
        elif quote is None and ch == ",":
            item = "".join(current).strip()
            if item:
                values.append(item)
            current = []
        else:
            current.append(ch)

    item = "".join(current).strip()
    if item:
        values.append(item)
    return values


class StatementRepairer:
    """Heuristically corrects INSERT column/value count mismatches."""

    def repair(self, sql: str) -> str:
        """
        Repair an INSERT INTO Employees statement.

        Non-INSERT statements and statements that do not match the expected
        shape are returned unchanged.

        Args:
            sql: Candidate SQL statement

        Returns:
            The repaired statement, or the input when no repair applies
        """
        if not sql or not sql.strip():
            return sql

        match = _INSERT_PATTERN.search(sql)
        if match is None:
            return sql

        columns = split_columns(match.group(1))
        values = split_values(match.group(2))

        if len(columns) == len(values):
            return sql

        logger.info(
            "insert_arity_mismatch",
            columns=len(columns),
            values=len(values),
        )

        try:
            repaired = self._align(columns, values)
        except RepairUnresolvable as e:
            logger.warning("insert_unrecoverable", reason=str(e), placeholder=PLACEHOLDER_INSERT)
            return PLACEHOLDER_INSERT

        if repaired is None:
            logger.info("insert_left_unchanged", sql=sql)
            return sql

        logger.info("insert_repaired", sql=repaired)
        return repaired

    @staticmethod
    def _align(columns: list[str], values: list[str]) -> str | None:
        """Apply the first matching repair rule; None when no rule applies."""
        if len(columns) > 1 and len(values) == 1:
            return f"INSERT INTO Employees (Name) VALUES ({values[0]})"

        if len(values) > 1 and len(columns) > len(values):
            kept = columns[: len(values)]
            return (
                f"INSERT INTO Employees ({', '.join(kept)}) "
                f"VALUES ({', '.join(values)})"
            )

        if columns and not values:
            raise RepairUnresolvable(
                f"{len(columns)} column(s) declared but no values supplied"
            )

        return None
