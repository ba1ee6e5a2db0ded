"""
LLM Module
==========

Pluggable LLM interfaces behind the translator boundary.
"""

from sql_chat.llm.base import LLMInterface
from sql_chat.llm.mock import MockLLM
from sql_chat.llm.ollama import OllamaLLM

__all__ = [
    "LLMInterface",
    "MockLLM",
    "OllamaLLM",
]
