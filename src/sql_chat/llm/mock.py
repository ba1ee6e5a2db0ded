"""
Mock LLM
========

Canned-response LLM for tests and offline demos.
"""

from sql_chat.llm.base import LLMInterface
from sql_chat.models import LLMResponse


class MockLLM(LLMInterface):
    """
    Returns canned text keyed by prompt substrings.

    Keys are matched against the last ``Q:`` line of the prompt when there is
    one (the utterance), otherwise against the whole prompt, so the few-shot
    examples in a translator prompt do not cause false matches.
    """

    def __init__(
        self,
        responses: dict[str, list[str]] | None = None,
        default: str = "SELECT * FROM Employees",
    ) -> None:
        """
        Initialize with canned responses.

        Args:
            responses: Dict mapping utterance substrings to a list of outputs,
                       returned in sequence on repeated matches
            default: Output when nothing matches
        """
        self.responses = responses or {}
        self.default = default
        self.call_counts: dict[str, int] = {}
        self.prompts: list[str] = []

    @property
    def model(self) -> str:
        return "mock-llm-v1"

    @staticmethod
    def _subject(prompt: str) -> str:
        questions = [line for line in prompt.splitlines() if line.startswith("Q:")]
        return questions[-1] if questions else prompt

    def generate(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        self.prompts.append(prompt)
        subject = self._subject(prompt).lower()

        for key, outputs in self.responses.items():
            if key.lower() in subject:
                count = self.call_counts.get(key, 0)
                self.call_counts[key] = count + 1
                return LLMResponse(
                    content=outputs[min(count, len(outputs) - 1)],
                    model=self.model,
                )

        return LLMResponse(content=self.default, model=self.model)

    def reset(self) -> None:
        """Reset call counts and recorded prompts."""
        self.call_counts = {}
        self.prompts = []
