"""
Fallback Generator
==================

Deterministic, pattern-driven SQL generation for common employee phrasings.
No LLM round-trip is involved. Builders are independent and are tried in a
fixed priority order: insert, update, delete.
"""

import re

import structlog

logger = structlog.get_logger(__name__)

_WORDS = r"[a-z'.-]+(?:\s+[a-z'.-]+)*?"
_SHORT_NAME = r"[a-z'.-]+(?:\s+[a-z'.-]+){0,2}?"
# Questions and listing requests are never a name
_QUESTION_WORDS = (
    r"(?:who|what|which|how|when|why|show|list|find|get|display|count|are|is|were|did|does|any|all)"
)

_ADD_EMPLOYEE = re.compile(
    rf"^add\s+(?:new\s+)?employee\s+({_WORDS})"
    rf"(?:\s+to\s+(?:the\s+)?({_WORDS}))?"
    r"(?:\s+with\s+(?:a\s+)?salary\s+(?:of\s+)?(\d+))?$",
    re.IGNORECASE,
)
_ASSIGN = re.compile(
    rf"^(?:assign|move|transfer)\s+({_WORDS})\s+to\s+(?:the\s+)?({_WORDS})"
    r"(?:\s+(?:department|team))?"
    r"(?:\s+and\s+give\s+(?:him|her|them)\s+a\s+salary\s+of\s+(\d+))?$",
    re.IGNORECASE,
)
_RAISE = re.compile(rf"^give\s+({_WORDS})\s+a\s+raise\s+to\s+(\d+)$", re.IGNORECASE)
_DELETE_PATTERNS = (
    re.compile(rf"^(?:fire|terminate|dismiss|remove)\s+employee\s+({_SHORT_NAME})$", re.IGNORECASE),
    re.compile(rf"^(?:fire|terminate|dismiss)\s+({_SHORT_NAME})$", re.IGNORECASE),
    re.compile(
        rf"^(?!{_QUESTION_WORDS}\b)({_SHORT_NAME})\s+(?:has\s+been\s+|was\s+)?"
        r"(?:fired|terminated|dismissed|laid\s+off|let\s+go)(?:\s+.*)?$",
        re.IGNORECASE,
    ),
)

NOT_HANDLED = (False, "")


def _display_name(text: str) -> str:
    """Collapse whitespace; capitalize words typed all in lower case."""
    return " ".join(part if part.lower() != part else part.capitalize() for part in text.split())


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _clean(text: str) -> str:
    return text.strip().rstrip(".!?").strip()


class FallbackGenerator:
    """Builds INSERT/UPDATE/DELETE statements from known phrasings."""

    def try_insert(self, text: str) -> tuple[bool, str]:
        """'add [new] employee NAME [to DEPARTMENT] [with salary N]'"""
        match = _ADD_EMPLOYEE.search(_clean(text))
        if match is None:
            return NOT_HANDLED

        name, department, salary = match.groups()
        columns = ["Name"]
        values = [_quote(_display_name(name))]
        if department:
            columns.append("Department")
            values.append(_quote(_display_name(department)))
        if salary:
            columns.append("Salary")
            values.append(salary)

        sql = f"INSERT INTO Employees ({', '.join(columns)}) VALUES ({', '.join(values)})"
        logger.info("fallback_generated", operation="insert", sql=sql)
        return True, sql

    def try_update(self, text: str) -> tuple[bool, str]:
        """'assign/move/transfer NAME to DEPARTMENT [...salary of N]' or 'give NAME a raise to N'"""
        text = _clean(text)

        match = _ASSIGN.search(text)
        if match is not None:
            name, department, salary = match.groups()
            assignments = [f"Department = {_quote(_display_name(department))}"]
            if salary:
                assignments.append(f"Salary = {salary}")
            sql = (
                f"UPDATE Employees SET {', '.join(assignments)} "
                f"WHERE Name = {_quote(_display_name(name))}"
            )
            logger.info("fallback_generated", operation="update", sql=sql)
            return True, sql

        match = _RAISE.search(text)
        if match is not None:
            name, salary = match.groups()
            sql = f"UPDATE Employees SET Salary = {salary} WHERE Name = {_quote(_display_name(name))}"
            logger.info("fallback_generated", operation="update", sql=sql)
            return True, sql

        return NOT_HANDLED

    def try_delete(self, text: str) -> tuple[bool, str]:
        """'fire/terminate/dismiss NAME' or 'NAME has been fired/terminated/laid off'"""
        text = _clean(text)
        for pattern in _DELETE_PATTERNS:
            match = pattern.search(text)
            if match is None:
                continue
            name = _display_name(match.group(1))
            if not name:
                continue
            sql = f"DELETE FROM Employees WHERE Name = {_quote(name)}"
            logger.info("fallback_generated", operation="delete", sql=sql)
            return True, sql
        return NOT_HANDLED

    def try_generate(self, text: str) -> tuple[bool, str]:
        """First match among insert, update, delete."""
        if not text or not text.strip():
            return NOT_HANDLED
        for builder in (self.try_insert, self.try_update, self.try_delete):
            handled, sql = builder(text)
            if handled:
                return handled, sql
        return NOT_HANDLED
