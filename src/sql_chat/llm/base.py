"""
Base LLM Interface
==================

Abstract interface for the language models behind the translator boundary.
"""

from abc import ABC, abstractmethod

from sql_chat.models import LLMResponse


class LLMInterface(ABC):
    """Abstract interface for LLM providers."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier reported in audit entries."""
        pass

    @abstractmethod
    def generate(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        """
        Generate a completion for a prompt.

        Implementations must bound the call with a timeout and raise
        TranslationError rather than hang or leak transport exceptions.

        Args:
            prompt: The rendered prompt
            system_prompt: Optional system prompt for context

        Returns:
            LLMResponse with generated content
        """
        pass
