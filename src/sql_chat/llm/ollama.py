"""
Ollama LLM
==========

Client for a local Ollama server's /api/generate endpoint.
"""

import httpx
import structlog

from sql_chat.errors import TranslationError
from sql_chat.llm.base import LLMInterface
from sql_chat.models import LLMResponse

logger = structlog.get_logger(__name__)


class OllamaLLM(LLMInterface):
    """
    Non-streaming Ollama completion client.

    Example:
        llm = OllamaLLM(model="phi3:3.8b", base_url="http://localhost:11434")
        response = llm.generate("Q: Show me all employees\\nA: ")
    """

    def __init__(
        self,
        model: str = "phi3:3.8b",
        base_url: str = "http://localhost:11434",
        timeout: float = 30.0,
        temperature: float = 0.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.client = client or httpx.Client(timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    def generate(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if system_prompt:
            payload["system"] = system_prompt

        try:
            response = self.client.post(
                f"{self.base_url}/api/generate", json=payload, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("llm_timeout", model=self._model, timeout=self.timeout)
            raise TranslationError(
                f"The language model did not respond within {self.timeout:g} seconds"
            ) from e
        except httpx.HTTPError as e:
            logger.warning("llm_request_failed", model=self._model, error=str(e))
            raise TranslationError(f"Language model request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("llm_bad_response", model=self._model, error=str(e))
            raise TranslationError("Language model returned a malformed response") from e
        if not isinstance(data, dict):
            logger.warning("llm_bad_response", model=self._model, body_type=type(data).__name__)
            raise TranslationError("Language model returned a malformed response")

        return LLMResponse(
            content=data.get("response", ""),
            model=data.get("model", self._model),
            tokens_used=data.get("prompt_eval_count", 0) + data.get("eval_count", 0),
        )

    def close(self) -> None:
        self.client.close()
