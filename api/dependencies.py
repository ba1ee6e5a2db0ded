"""
Route Dependencies
==================

Per-request access to the services built at startup.
"""

from fastapi import Depends, Request

from sql_chat.config import Settings
from sql_chat.llm.base import LLMInterface
from sql_chat.pipeline import ChatPipeline
from sql_chat.summarizer import AnswerSummarizer
from sql_chat.transcript import TranscriptLog
from sql_chat.translator import Translator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_llm(request: Request) -> LLMInterface:
    return request.app.state.llm


def get_transcript(request: Request) -> TranscriptLog:
    return request.app.state.transcript


def get_pipeline(
    request: Request,
    llm: LLMInterface = Depends(get_llm),
    settings: Settings = Depends(get_settings),
) -> ChatPipeline:
    """A fresh pipeline per request; the shared pieces it wraps are stateless."""
    state = request.app.state
    translator = Translator(llm, state.store.get_schema_description)
    summarizer = AnswerSummarizer(llm) if settings.summarize_results else None
    return ChatPipeline(
        translator=translator,
        executor=state.executor,
        summarizer=summarizer,
        use_fallback=settings.use_fallback_generator,
    )
