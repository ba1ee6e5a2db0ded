"""
Employee Store
==============

SQLite-backed store reached through short-lived sessions. Each session is a
single connection opened for one statement group and closed on every exit
path.
"""

import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import structlog

from sql_chat.errors import StoreExecutionError

logger = structlog.get_logger(__name__)

EMPLOYEES_DDL = """
CREATE TABLE IF NOT EXISTS Employees (
    Id INTEGER PRIMARY KEY,
    Name TEXT NOT NULL,
    Department TEXT NOT NULL DEFAULT 'Unknown',
    Salary INTEGER NOT NULL DEFAULT 0,
    HireDate TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d','now')) CHECK (HireDate GLOB '[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]')
)"""

SAMPLE_EMPLOYEES = [
    ("Alice Johnson", "Engineering", 95000, "2022-01-15"),
    ("Bob Smith", "Sales", 82000, "2021-11-30"),
    ("Charlie Brown", "Engineering", 110000, "2020-05-20"),
    ("Diana Prince", "Sales", 78000, "2022-08-01"),
    ("Eve Adams", "HR", 65000, "2023-02-10"),
]

DATA_QUALITY_NOTES = """CRITICAL DATA QUALITY NOTES:
- Some records may have corrupted or missing data
- Department names may be truncated or merged with other text
- Use WHERE clauses with COALESCE and IS NOT NULL for safety"""


class StoreSession:
    """Statement execution on one open connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        try:
            return self.connection.execute(sql, params)
        except sqlite3.Error as e:
            raise StoreExecutionError(str(e)) from e

    def execute_reader(self, sql: str, params: Sequence[Any] = ()) -> tuple[list[str], list[tuple]]:
        """Run a query and return (column names, rows)."""
        cursor = self._execute(sql, params)
        columns = [d[0] for d in cursor.description or ()]
        try:
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreExecutionError(str(e)) from e
        return columns, rows

    def execute_non_query(self, sql: str, params: Sequence[Any] = ()) -> tuple[int, int | None]:
        """Run a mutating statement and return (rows affected, last row id)."""
        cursor = self._execute(sql, params)
        return max(cursor.rowcount, 0), cursor.lastrowid

    def execute_scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        row = self._execute(sql, params).fetchone()
        return row[0] if row else None


class EmployeeStore:
    """The company database holding the single Employees relation."""

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout

    @contextmanager
    def session(self) -> Iterator[StoreSession]:
        """
        Open a connection for one statement group.

        Commits when the block exits normally, rolls back when it raises,
        and always closes the connection.
        """
        try:
            connection = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreExecutionError(str(e)) from e

        try:
            yield StoreSession(connection)
            connection.commit()
        except BaseException:
            connection.rollback()
            raise
        finally:
            connection.close()

    def initialize(self, seed: bool = True) -> None:
        """Create the Employees table and seed sample rows when it is empty."""
        with self.session() as session:
            session.execute_non_query(EMPLOYEES_DDL)
            count = session.execute_scalar("SELECT COUNT(*) FROM Employees")
            if seed and count == 0:
                for row in SAMPLE_EMPLOYEES:
                    session.execute_non_query(
                        "INSERT INTO Employees (Name, Department, Salary, HireDate) VALUES (?, ?, ?, ?)",
                        row,
                    )
                logger.info("employees_seeded", rows=len(SAMPLE_EMPLOYEES), path=self.path)

    def ping(self) -> bool:
        try:
            with self.session() as session:
                session.execute_scalar("SELECT 1")
        except StoreExecutionError:
            return False
        return True

    def get_schema_description(self) -> str:
        """Schema text used to build translator prompts."""
        lines: list[str] = []

        with self.session() as session:
            ddl = session.execute_scalar(
                "SELECT sql FROM sqlite_master WHERE type='table' AND name='Employees'"
            )
            if ddl:
                lines.append(ddl)

            lines.append("")
            lines.append(DATA_QUALITY_NOTES)
            lines.append("")
            lines.append("Sample Data Context:")

            try:
                _, rows = session.execute_reader(
                    "SELECT DISTINCT Department FROM Employees "
                    "WHERE Department IS NOT NULL AND Department != '' ORDER BY Department"
                )
                departments = [f"'{r[0]}'" for r in rows if r[0] and len(r[0]) < 50]
                lines.append("Available Departments: " + ", ".join(departments))
            except StoreExecutionError as e:
                lines.append(f"Error reading departments: {e}")

            try:
                total = session.execute_scalar(
                    "SELECT COUNT(*) FROM Employees WHERE Name IS NOT NULL AND Name != ''"
                )
                lines.append(f"Total Valid Employee Records: {total}")
            except StoreExecutionError as e:
                lines.append(f"Error counting employees: {e}")

        return "\n".join(lines)
