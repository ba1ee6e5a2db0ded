"""
Unit Tests for ChatPipeline
===========================

End-to-end chat turns over a mock LLM and a temporary employee store.
"""

import pytest

from sql_chat.errors import TranslationError
from sql_chat.executor import SmartExecutor
from sql_chat.intent import REJECTION_MESSAGE
from sql_chat.llm.base import LLMInterface
from sql_chat.llm.mock import MockLLM
from sql_chat.models import (
    CandidateStatement,
    ExecutionResult,
    FormattedTable,
    LLMResponse,
    StatementKind,
)
from sql_chat.pipeline import (
    NO_DATA_MESSAGE,
    OUTCOME_ACCESS_DENIED,
    OUTCOME_ERROR,
    OUTCOME_EXECUTED,
    OUTCOME_EXECUTION_ERROR,
    OUTCOME_INTENT_REJECTED,
    OUTCOME_NO_DATA,
    ChatPipeline,
)
from sql_chat.summarizer import AnswerSummarizer
from sql_chat.translator import Translator


class TimeoutLLM(LLMInterface):
    @property
    def model(self) -> str:
        return "timeout"

    def generate(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        raise TranslationError("The language model did not respond within 30 seconds")


class EmptySelectExecutor:
    """Executor stand-in whose SELECT produces no output at all."""

    def execute(self, sql: str) -> ExecutionResult:
        return ExecutionResult(kind=StatementKind.SELECT, table=FormattedTable(headers=[]))


class TestReads:
    def test_select_returns_table(self, pipeline: ChatPipeline) -> None:
        result = pipeline.process("Show engineering salaries", privileged=False)

        assert result.outcome == OUTCOME_EXECUTED
        assert result.statement_kind is StatementKind.SELECT
        assert result.reply.sql_query_used == (
            "SELECT Name, Salary FROM Employees WHERE Department = 'Engineering' ORDER BY Name;"
        )
        assert result.reply.response_text == (
            "| Name | Salary |\n|----|----|\n| Alice Johnson | $95,000 |\n| Charlie Brown | $110,000 |\n"
        )
        assert result.reply.processing_time_ms >= 0

    def test_year_function_is_rewritten(self, pipeline: ChatPipeline) -> None:
        result = pipeline.process("Who was hired in 2022?", privileged=False)
        assert "Alice Johnson" in result.reply.response_text
        assert "Diana Prince" in result.reply.response_text
        assert "Bob Smith" not in result.reply.response_text

    def test_empty_result_keeps_headers(self, pipeline: ChatPipeline) -> None:
        result = pipeline.process("Is nobody in Legal?", privileged=False)
        assert result.outcome == OUTCOME_EXECUTED
        assert result.reply.response_text == "| Name |\n|----|\n"

    def test_no_output_is_reported(self, translator: Translator) -> None:
        pipeline = ChatPipeline(translator=translator, executor=EmptySelectExecutor())
        result = pipeline.process("Show me all employees", privileged=False)

        assert result.outcome == OUTCOME_NO_DATA
        assert result.reply.response_text == NO_DATA_MESSAGE
        assert result.reply.sql_query_used == "SELECT * FROM Employees"


class TestIntentRejection:
    def test_write_intent_rejected_before_translation(
        self, pipeline: ChatPipeline, mock_llm: MockLLM
    ) -> None:
        """An unprivileged write request never reaches the model."""
        result = pipeline.process("please update Alice's salary to 90000", privileged=False)

        assert result.outcome == OUTCOME_INTENT_REJECTED
        assert result.reply.response_text == REJECTION_MESSAGE
        assert result.reply.sql_query_used is None
        assert mock_llm.prompts == []
        assert [entry.step for entry in result.audit_trail] == ["intent_rejection", "reply"]

    def test_privileged_caller_is_not_prefiltered(self, pipeline: ChatPipeline) -> None:
        result = pipeline.process("please update Alice's salary to 90000", privileged=True)
        assert result.outcome != OUTCOME_INTENT_REJECTED


class TestAccessDenied:
    def test_read_only_gate_blocks_missed_write(
        self, pipeline: ChatPipeline, employee_names
    ) -> None:
        result = pipeline.process("a sneaky question about staff", privileged=False)

        assert result.outcome == OUTCOME_ACCESS_DENIED
        assert result.reply.response_text == (
            "Access Denied: Write operations (DELETE) are not allowed. "
            "Only SELECT queries are permitted for non-admin users."
        )
        assert result.reply.sql_query_used == "DELETE FROM Employees WHERE Id = 1"
        assert "Alice Johnson" in employee_names()

    def test_multiple_statements_denied_for_everyone(
        self, executor: SmartExecutor, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Extraction keeps one statement, so inject a batch after it
        monkeypatch.setattr(
            "sql_chat.pipeline.normalize",
            lambda raw: CandidateStatement(sql="SELECT 1; DELETE FROM Employees", kind=StatementKind.SELECT),
        )
        pipeline = ChatPipeline(translator=Translator(MockLLM(default="SELECT 1"), ""), executor=executor)
        result = pipeline.process("anything", privileged=True)

        assert result.outcome == OUTCOME_ACCESS_DENIED
        assert result.reply.response_text.startswith("Access Denied: Multiple statements are not allowed")


class TestWrites:
    def test_insert_is_repaired(self, pipeline: ChatPipeline, employee_names) -> None:
        """A mismatched INSERT is repaired to the name-only form and executed."""
        result = pipeline.process("add Jane Doe to Marketing", privileged=True)

        assert result.outcome == OUTCOME_EXECUTED
        assert result.statement_kind is StatementKind.INSERT
        assert result.reply.sql_query_used == "INSERT INTO Employees (Name) VALUES ('Jane Doe')"
        assert result.reply.response_text.startswith("Successfully created new record:\n")
        assert "| 6 | Jane Doe | Unknown | $0 |" in result.reply.response_text
        assert "Jane Doe" in employee_names()

    def test_fallback_skips_the_model(
        self, pipeline: ChatPipeline, mock_llm: MockLLM, employee_names
    ) -> None:
        result = pipeline.process("Fire Bob Smith", privileged=True)

        assert result.reply.sql_query_used == "DELETE FROM Employees WHERE Name = 'Bob Smith'"
        assert "Successfully deleted 1 record(s)" in result.reply.response_text
        assert mock_llm.prompts == []
        assert "Bob Smith" not in employee_names()
        assert result.audit_trail[0].step == "fallback"

    def test_fallback_disabled(self, translator: Translator, executor: SmartExecutor, mock_llm: MockLLM) -> None:
        pipeline = ChatPipeline(translator=translator, executor=executor, use_fallback=False)
        pipeline.process("Fire Bob Smith", privileged=True)
        assert len(mock_llm.prompts) == 1

    def test_fallback_not_offered_to_read_only_callers(
        self, pipeline: ChatPipeline, mock_llm: MockLLM
    ) -> None:
        # "Bob Smith was let go" carries no write keyword, so it passes the pre-filter
        result = pipeline.process("Bob Smith was let go", privileged=False)

        assert len(mock_llm.prompts) == 1
        assert result.audit_trail[0].step == "translation"

    def test_execution_error_keeps_sql(self, executor: SmartExecutor) -> None:
        llm = MockLLM(default="UPDATE Employees SET Salary = 1 WHERE Nope = 1")
        pipeline = ChatPipeline(translator=Translator(llm, ""), executor=executor, use_fallback=False)
        result = pipeline.process("change something", privileged=True)

        assert result.outcome == OUTCOME_EXECUTION_ERROR
        assert result.reply.response_text.startswith("Error executing query:")
        assert result.reply.sql_query_used == "UPDATE Employees SET Salary = 1 WHERE Nope = 1"


class TestFailures:
    def test_translation_failure(self, executor: SmartExecutor) -> None:
        pipeline = ChatPipeline(translator=Translator(TimeoutLLM(), ""), executor=executor)
        result = pipeline.process("Show me all employees", privileged=False)

        assert result.outcome == OUTCOME_ERROR
        assert result.reply.response_text == (
            "An error occurred: The language model did not respond within 30 seconds"
        )
        assert result.reply.sql_query_used is None

    def test_unexpected_error_becomes_reply(self, translator: Translator) -> None:
        class BrokenExecutor:
            def execute(self, sql: str) -> ExecutionResult:
                raise RuntimeError("disk on fire")

        pipeline = ChatPipeline(translator=translator, executor=BrokenExecutor())
        result = pipeline.process("Show me all employees", privileged=False)

        assert result.outcome == OUTCOME_ERROR
        assert result.reply.response_text == "An error occurred: disk on fire"


class TestAuditTrail:
    def test_steps_in_order(self, pipeline: ChatPipeline) -> None:
        result = pipeline.process("Show me all employees", privileged=False)
        assert [entry.step for entry in result.audit_trail] == [
            "translation",
            "normalization",
            "verification",
            "execution",
            "reply",
        ]
        verification = result.audit_trail[2]
        assert [r.verifier_name for r in verification.verification_results] == [
            "SingleStatementVerifier",
            "ReadOnlyVerifier",
        ]

    def test_trail_resets_between_turns(self, pipeline: ChatPipeline) -> None:
        pipeline.process("Show me all employees", privileged=False)
        result = pipeline.process("Show me all employees", privileged=False)
        assert len(result.audit_trail) == 5


class TestSummarizer:
    def test_summary_replaces_select_output(self, translator: Translator, executor: SmartExecutor) -> None:
        summary_llm = MockLLM(default="The company pays $86,000 on average.")
        pipeline = ChatPipeline(
            translator=translator, executor=executor, summarizer=AnswerSummarizer(summary_llm)
        )
        result = pipeline.process("How much is the average salary overall, roughly?", privileged=False)

        # "average salary" is a tabular request and bypasses the summarizer
        assert result.reply.response_text.startswith("| Average Salary |")
        assert summary_llm.prompts == []

        result = pipeline.process("What do engineers earn?", privileged=False)
        assert result.reply.response_text == "The company pays $86,000 on average."
        assert len(summary_llm.prompts) == 1

    def test_writes_are_not_summarized(self, translator: Translator, executor: SmartExecutor) -> None:
        summary_llm = MockLLM(default="unused")
        pipeline = ChatPipeline(
            translator=translator, executor=executor, summarizer=AnswerSummarizer(summary_llm)
        )
        result = pipeline.process("Fire Bob Smith", privileged=True)
        assert "Successfully deleted" in result.reply.response_text
        assert summary_llm.prompts == []
