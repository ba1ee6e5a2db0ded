"""
SQL Text Normalizer
===================

Isolates a single SQL statement from raw model output, which may carry
markdown fences, explanatory prose, or trailing text.
"""

import re

from sql_chat.models import CandidateStatement, StatementKind

_FENCE_OPEN = re.compile(r"```(?:sql)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"```\s*")
_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)

_STATEMENT_STARTS = ("SELECT", "INSERT", "UPDATE", "DELETE")


def strip_fences(text: str) -> str:
    """Remove triple-backtick fences, optionally tagged ``sql``."""
    text = _FENCE_OPEN.sub("", text)
    return _FENCE_CLOSE.sub("", text)


def strip_comments(sql: str) -> str:
    """Remove ``--`` line comments and ``/* */`` block comments."""
    sql = _LINE_COMMENT.sub("", sql)
    return _BLOCK_COMMENT.sub("", sql)


def clean_sql(sql: str) -> str:
    """Strip fences and comments, then surrounding whitespace."""
    if not sql or not sql.strip():
        return ""
    return strip_comments(strip_fences(sql).strip()).strip()


def statement_kind(sql: str) -> StatementKind:
    """Derive the statement kind from the first keyword after cleaning."""
    cleaned = clean_sql(sql)
    if not cleaned:
        return StatementKind.UNKNOWN
    first = cleaned.split(None, 1)[0].upper()
    for kind in (StatementKind.SELECT, StatementKind.INSERT, StatementKind.UPDATE, StatementKind.DELETE):
        if first.startswith(kind.name):
            return kind
    return StatementKind.UNKNOWN


def extract_statement(raw_output: str) -> str:
    """
    Extract the first SQL statement line from raw model output.

    The first line starting with SELECT/INSERT/UPDATE/DELETE wins and is cut
    after its first semicolon. When no such line exists the trimmed text is
    returned unchanged.
    """
    if not raw_output or not raw_output.strip():
        return ""

    text = strip_fences(raw_output)

    for line in text.splitlines():
        candidate = line.strip()
        if candidate.upper().startswith(_STATEMENT_STARTS):
            semicolon = candidate.find(";")
            if semicolon > 0:
                return candidate[: semicolon + 1]
            return candidate

    return text.strip()


def normalize(raw_output: str) -> CandidateStatement:
    """Normalize raw model output into a candidate statement."""
    sql = extract_statement(raw_output)
    return CandidateStatement(sql=sql, kind=statement_kind(sql))
