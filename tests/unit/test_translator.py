"""
Unit Tests for the Translator, Summarizer and LLM Backends
==========================================================
"""

import json

import httpx
import pytest

from sql_chat.errors import TranslationError
from sql_chat.llm.base import LLMInterface
from sql_chat.llm.mock import MockLLM
from sql_chat.llm.ollama import OllamaLLM
from sql_chat.models import LLMResponse
from sql_chat.pipeline import OUTCOME_ERROR, ChatPipeline
from sql_chat.summarizer import AnswerSummarizer
from sql_chat.translator import Translator


class FailingLLM(LLMInterface):
    """LLM whose every call times out."""

    @property
    def model(self) -> str:
        return "failing"

    def generate(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        raise TranslationError("The language model did not respond within 30 seconds")


class TestTranslatorPrompt:
    """One template, two privilege levels."""

    def test_privileged_prompt_has_write_examples(self) -> None:
        translator = Translator(MockLLM(), "CREATE TABLE Employees (...)")
        prompt = translator.build_prompt("Fire Bob Smith", privileged=True)

        assert "DELETE FROM Employees WHERE Name = 'Bob Smith'" in prompt
        assert "INSERT: Only specify columns with values." in prompt
        assert "read-only access" not in prompt

    def test_read_only_prompt_has_only_reads(self) -> None:
        translator = Translator(MockLLM(), "CREATE TABLE Employees (...)")
        prompt = translator.build_prompt("Show me all employees", privileged=False)

        assert "generate only SELECT statements" in prompt
        assert "INSERT" not in prompt
        assert "DELETE" not in prompt
        assert "UPDATE" not in prompt

    def test_prompt_shape(self) -> None:
        translator = Translator(MockLLM(), "  SCHEMA TEXT  ")
        prompt = translator.build_prompt("  Show me all employees ", privileged=False)

        assert "Schema:\nSCHEMA TEXT\n" in prompt
        assert prompt.endswith("Q: Show me all employees\nA: ")

    def test_schema_callable_read_per_prompt(self) -> None:
        calls = []

        def schema() -> str:
            calls.append(1)
            return f"schema v{len(calls)}"

        translator = Translator(MockLLM(), schema)
        assert "schema v1" in translator.build_prompt("a", privileged=False)
        assert "schema v2" in translator.build_prompt("b", privileged=True)


class TestTranslate:
    def test_returns_raw_model_text(self) -> None:
        llm = MockLLM(responses={"engineers": ["  ```sql\nSELECT 1\n```  "]})
        translator = Translator(llm, "")
        assert translator.translate("list engineers", privileged=False) == "```sql\nSELECT 1\n```"
        assert len(llm.prompts) == 1

    def test_mock_matches_utterance_not_examples(self) -> None:
        # Every prompt contains the few-shot example "Fire Bob Smith"
        llm = MockLLM(responses={"bob smith": ["DELETE FROM Employees"]}, default="SELECT 1")
        translator = Translator(llm, "")
        assert translator.translate("Show me all employees", privileged=True) == "SELECT 1"

    def test_failure_propagates(self) -> None:
        with pytest.raises(TranslationError):
            Translator(FailingLLM(), "").translate("anything", privileged=False)


class TestMockLLM:
    def test_sequential_outputs(self) -> None:
        llm = MockLLM(responses={"revenue": ["first", "second"]})
        assert llm.generate("Q: revenue?").content == "first"
        assert llm.generate("Q: revenue?").content == "second"
        assert llm.generate("Q: revenue?").content == "second"

        llm.reset()
        assert llm.generate("Q: revenue?").content == "first"

    def test_default_output(self) -> None:
        llm = MockLLM(responses={"revenue": ["x"]}, default="SELECT 42")
        response = llm.generate("Q: headcount?")
        assert response.content == "SELECT 42"
        assert response.model == "mock-llm-v1"


class TestOllamaLLM:
    def test_generate_posts_prompt(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"model": "phi3:3.8b", "response": "SELECT 1", "prompt_eval_count": 12, "eval_count": 3},
            )

        llm = OllamaLLM(
            base_url="http://ollama.test/",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        response = llm.generate("Q: hi\nA: ", system_prompt="be brief")

        assert captured["url"] == "http://ollama.test/api/generate"
        assert captured["body"] == {
            "model": "phi3:3.8b",
            "prompt": "Q: hi\nA: ",
            "stream": False,
            "options": {"temperature": 0.0},
            "system": "be brief",
        }
        assert response.content == "SELECT 1"
        assert response.tokens_used == 15

    def test_timeout_raises_translation_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        llm = OllamaLLM(timeout=2, client=httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(TranslationError, match="within 2 seconds"):
            llm.generate("Q: hi")

    def test_http_error_raises_translation_error(self) -> None:
        llm = OllamaLLM(client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500))))
        with pytest.raises(TranslationError, match="request failed"):
            llm.generate("Q: hi")

    @pytest.mark.parametrize("body", [b"<html>gateway</html>", b"[1, 2]"])
    def test_malformed_body_raises_translation_error(self, body: bytes) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        llm = OllamaLLM(client=httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(TranslationError, match="malformed response"):
            llm.generate("Q: hi")

    def test_malformed_body_becomes_error_reply(self, executor) -> None:
        llm = OllamaLLM(
            client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"oops")))
        )
        result = ChatPipeline(translator=Translator(llm, ""), executor=executor).process(
            "Show me all employees", privileged=False
        )
        assert result.outcome == OUTCOME_ERROR
        assert result.reply.response_text == "An error occurred: Language model returned a malformed response"


class TestAnswerSummarizer:
    @pytest.mark.parametrize(
        "utterance",
        [
            "Show all employees",
            "List employees by department",
            "What's the average salary?",
            "Who was hired recently",
            "Top 3 employees by pay",
            "Employees order by salary",
        ],
    )
    def test_tabular_requests_bypass(self, utterance: str) -> None:
        assert AnswerSummarizer.should_bypass(utterance) is True

    def test_summarizes_other_requests(self) -> None:
        llm = MockLLM(default="Three people work in Sales.")
        summarizer = AnswerSummarizer(llm)
        assert summarizer.summarize("How many people work in Sales?", "| Count |\n|----|\n| 3 |\n") == (
            "Three people work in Sales."
        )
        assert "User Question: How many people work in Sales?" in llm.prompts[0]

    def test_bypass_skips_llm(self) -> None:
        llm = MockLLM()
        data = "| Name |\n|----|\n| Eve Adams |\n"
        assert AnswerSummarizer(llm).summarize("Show all employees", data) == data
        assert llm.prompts == []

    def test_failure_returns_data(self) -> None:
        data = "| Count |\n|----|\n| 3 |\n"
        assert AnswerSummarizer(FailingLLM()).summarize("How many in Sales?", data) == data
