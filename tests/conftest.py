"""
Pytest Fixtures
===============

Shared fixtures for the employee SQL chat tests.
"""

import os

# Keep spans in-process; must be set before the app module is imported
os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "disabled")

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_llm
from api.main import create_app
from sql_chat.config import Settings
from sql_chat.dates import DateNormalizer
from sql_chat.executor import SmartExecutor
from sql_chat.fallback import FallbackGenerator
from sql_chat.intent import IntentClassifier
from sql_chat.llm.mock import MockLLM
from sql_chat.pipeline import ChatPipeline
from sql_chat.repair import StatementRepairer
from sql_chat.store import EmployeeStore
from sql_chat.transcript import TranscriptLog
from sql_chat.translator import Translator
from sql_chat.verifiers.base import VerificationChain
from sql_chat.verifiers.read_only import ReadOnlyVerifier
from sql_chat.verifiers.statement import SingleStatementVerifier


@pytest.fixture
def store(tmp_path: Path) -> EmployeeStore:
    """Create a seeded employee store in a temporary directory."""
    store = EmployeeStore(str(tmp_path / "company.db"))
    store.initialize()
    return store


@pytest.fixture
def executor(store: EmployeeStore) -> SmartExecutor:
    """Create a SmartExecutor bound to the temporary store."""
    return SmartExecutor(store)


@pytest.fixture
def transcript(tmp_path: Path) -> TranscriptLog:
    """Create an initialized transcript log."""
    log = TranscriptLog(str(tmp_path / "app.db"))
    log.initialize()
    return log


@pytest.fixture
def intent_classifier() -> IntentClassifier:
    return IntentClassifier()


@pytest.fixture
def repairer() -> StatementRepairer:
    return StatementRepairer()


@pytest.fixture
def date_normalizer() -> DateNormalizer:
    return DateNormalizer()


@pytest.fixture
def fallback() -> FallbackGenerator:
    return FallbackGenerator()


@pytest.fixture
def read_only_verifier() -> ReadOnlyVerifier:
    return ReadOnlyVerifier()


@pytest.fixture
def single_statement_verifier() -> SingleStatementVerifier:
    return SingleStatementVerifier()


@pytest.fixture
def verification_chain() -> VerificationChain:
    """Create the default (read-only) verification chain."""
    return VerificationChain()


@pytest.fixture
def mock_llm() -> MockLLM:
    """Create a mock LLM with typical translator outputs."""
    return MockLLM(
        responses={
            "all employees": ["SELECT * FROM Employees"],
            "engineering": [
                "Here is the query:\n```sql\n"
                "SELECT Name, Salary FROM Employees WHERE Department = 'Engineering' ORDER BY Name;\n"
                "```\nThis lists engineers."
            ],
            "average salary": ["SELECT AVG(Salary) AS AverageSalary FROM Employees"],
            "jane doe": [
                "```sql\nINSERT INTO Employees (Name, Department) VALUES ('Jane Doe')\n```"
            ],
            "sneaky": ["DELETE FROM Employees WHERE Id = 1"],
            "hired in 2022": ["SELECT Name FROM Employees WHERE YEAR(HireDate) = 2022 ORDER BY Name"],
            "nobody": ["SELECT Name FROM Employees WHERE Department = 'Legal'"],
        }
    )


@pytest.fixture
def translator(mock_llm: MockLLM, store: EmployeeStore) -> Translator:
    return Translator(mock_llm, store.get_schema_description)


@pytest.fixture
def pipeline(translator: Translator, executor: SmartExecutor) -> ChatPipeline:
    """Create a pipeline over the mock LLM and temporary store."""
    return ChatPipeline(translator=translator, executor=executor)


@pytest.fixture
def api_llm() -> MockLLM:
    """Mock LLM used behind the HTTP API."""
    return MockLLM(
        responses={
            "all employees": ["SELECT Name, Department FROM Employees ORDER BY Name"],
            "sneaky": ["DELETE FROM Employees"],
        }
    )


@pytest.fixture
def api_client(tmp_path: Path, api_llm: MockLLM) -> Iterator[TestClient]:
    """Create a TestClient over an app with temporary stores and a mock LLM."""
    settings = Settings(
        database_path=str(tmp_path / "company.db"),
        transcript_path=str(tmp_path / "app.db"),
    )
    app = create_app(settings)
    app.dependency_overrides[get_llm] = lambda: api_llm

    with TestClient(app) as client:
        yield client


@pytest.fixture
def employee_names(store: EmployeeStore):
    """Return a callable listing the names currently in the store, sorted."""

    def _names() -> list[str]:
        with store.session() as session:
            _, rows = session.execute_reader("SELECT Name FROM Employees ORDER BY Name")
        return [row[0] for row in rows]

    return _names
