"""
Date Normalizer
===============

Validates and rewrites HireDate literals in INSERT/UPDATE statements to the
YYYY-MM-DD form enforced by the store's CHECK constraint. Failing here gives
a clearer error than the constraint violation the store would raise.
"""

import re
from datetime import datetime

import structlog
from dateutil import parser as date_parser

from sql_chat.config import DEFAULT_DATE_LAYOUTS, DateLayouts
from sql_chat.errors import DateFormatError
from sql_chat.repair import split_columns, split_values

logger = structlog.get_logger(__name__)

_CANONICAL_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_INSERT_WITH_HIRE_DATE = re.compile(
    r"INSERT\s+INTO\s+Employees\s*\(([^)]*)\)\s*VALUES\s*\(([^)]*)\)",
    re.IGNORECASE,
)
_HIRE_DATE_ASSIGNMENT = re.compile(r"(HireDate\s*=\s*)'([^']+)'", re.IGNORECASE)

_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


class DateNormalizer:
    """Coerces date literals to the canonical YYYY-MM-DD layout."""

    def __init__(self, layouts: DateLayouts = DEFAULT_DATE_LAYOUTS) -> None:
        self.layouts = layouts

    def is_canonical(self, value: str) -> bool:
        if not value or not _CANONICAL_SHAPE.match(value):
            return False
        try:
            datetime.strptime(value, self.layouts.canonical)
        except ValueError:
            return False
        return True

    def normalize_date(self, value: str) -> str:
        """
        Normalize one date literal.

        Tries, in order: already canonical, the fixed alternate layouts, then
        a generic best-effort parse.

        Raises:
            DateFormatError: If no strategy yields a valid calendar date
        """
        text = (value or "").strip()
        if not text:
            raise DateFormatError(value)

        if self.is_canonical(text):
            return text

        for layout in self.layouts.alternates:
            try:
                return datetime.strptime(text, layout).strftime(self.layouts.canonical)
            except ValueError:
                continue

        # Two different defaults expose any part the literal left out
        try:
            parsed = date_parser.parse(text, default=_FILL_A)
            check = date_parser.parse(text, default=_FILL_B)
        except (ValueError, OverflowError) as e:
            raise DateFormatError(value) from e

        if parsed.date() != check.date():
            raise DateFormatError(value)

        return parsed.strftime(self.layouts.canonical)

    def normalize_insert_dates(self, sql: str) -> str:
        """
        Normalize the HireDate literal of an INSERT INTO Employees statement.

        The HireDate value is located by the position of the HireDate column
        in the declared column list. Statements without a HireDate column are
        returned unchanged.
        """
        match = _INSERT_WITH_HIRE_DATE.search(sql)
        if match is None:
            return sql

        columns = [c.lower() for c in split_columns(match.group(1))]
        if "hiredate" not in columns:
            return sql

        values = split_values(match.group(2))
        position = columns.index("hiredate")
        if position >= len(values):
            return sql

        literal = values[position]
        unquoted = literal.strip("'\"")
        try:
            normalized = self.normalize_date(unquoted)
        except DateFormatError as e:
            raise DateFormatError(unquoted, f"Invalid date format in INSERT query: {e}") from e

        if normalized == unquoted:
            return sql

        logger.info("insert_date_normalized", original=unquoted, normalized=normalized)
        values[position] = f"'{normalized}'"
        start, end = match.span(2)
        return sql[:start] + ", ".join(values) + sql[end:]

    def normalize_update_dates(self, sql: str) -> str:
        """Normalize every ``HireDate = '<literal>'`` assignment independently."""

        def _rewrite(match: re.Match) -> str:
            original = match.group(2)
            try:
                normalized = self.normalize_date(original)
            except DateFormatError as e:
                raise DateFormatError(original, f"Invalid date format in UPDATE query: {e}") from e
            if normalized != original:
                logger.info("update_date_normalized", original=original, normalized=normalized)
            return f"{match.group(1)}'{normalized}'"

        return _HIRE_DATE_ASSIGNMENT.sub(_rewrite, sql)
