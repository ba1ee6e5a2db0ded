"""
Result Formatting
=================

Turns result rows into a FormattedTable with humanized headers and currency
formatting for salary-like columns.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Sequence

from sql_chat.models import FormattedTable

_HEADER_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z][a-z])|(?<=[a-z])(?=[A-Z])")
_MONEY_WORDS = ("salary", "wage", "pay", "income")
_AVERAGE_SALARY = re.compile(r"^(avg|average).*salary", re.IGNORECASE)


def format_header(column: str) -> str:
    """'AverageSalesSalary' -> 'Average Sales Salary'; first letter capitalized."""
    if not column:
        return column
    spaced = _HEADER_BOUNDARY.sub(" ", column)
    return spaced[0].upper() + spaced[1:]


def is_money_column(column: str) -> bool:
    compact = column.replace(" ", "").lower()
    return any(word in compact for word in _MONEY_WORDS) or bool(_AVERAGE_SALARY.match(compact))


def format_currency(amount: Decimal) -> str:
    """Currency with no fractional digits, e.g. $95,000 or -$1,200."""
    rounded = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"


def format_value(value: Any, column: str) -> str:
    """Render one cell; None renders as an empty cell."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.hex()

    text = str(value)
    if is_money_column(column) and not isinstance(value, bool):
        try:
            return format_currency(Decimal(text))
        except InvalidOperation:
            return text
    return text


def format_rows(columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> FormattedTable:
    """Build a FormattedTable from column names and raw row tuples."""
    table = FormattedTable(headers=[format_header(c) for c in columns])
    for row in rows:
        table.rows.append([format_value(value, column) for value, column in zip(row, columns)])
    return table
