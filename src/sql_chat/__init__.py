"""
Employee SQL Chat
=================

Text-to-SQL chat core for a single employee table: intent pre-filtering,
statement normalization and repair, read-only validation and smart execution.
"""

from sql_chat.models import (
    AuditEntry,
    CandidateStatement,
    ChatReply,
    ExecutionResult,
    FormattedTable,
    Intent,
    LLMResponse,
    PipelineResult,
    StatementKind,
    VerificationResult,
    VerificationStatus,
)
from sql_chat.errors import (
    DateFormatError,
    RepairUnresolvable,
    SqlChatError,
    StoreExecutionError,
    TranslationError,
    ValidationError,
)
from sql_chat.config import Settings
from sql_chat.intent import IntentClassifier
from sql_chat.normalizer import normalize
from sql_chat.repair import StatementRepairer
from sql_chat.dates import DateNormalizer
from sql_chat.store import EmployeeStore
from sql_chat.executor import SmartExecutor
from sql_chat.fallback import FallbackGenerator
from sql_chat.translator import Translator
from sql_chat.summarizer import AnswerSummarizer
from sql_chat.transcript import TranscriptLog
from sql_chat.pipeline import ChatPipeline
from sql_chat.verifiers import (
    ReadOnlyVerifier,
    SingleStatementVerifier,
    VerificationChain,
    Verifier,
)
from sql_chat.llm import LLMInterface, MockLLM, OllamaLLM

__version__ = "0.1.0"

__all__ = [
    # Models
    "StatementKind",
    "Intent",
    "VerificationStatus",
    "VerificationResult",
    "CandidateStatement",
    "FormattedTable",
    "ExecutionResult",
    "AuditEntry",
    "ChatReply",
    "PipelineResult",
    "LLMResponse",
    # Errors
    "SqlChatError",
    "ValidationError",
    "DateFormatError",
    "RepairUnresolvable",
    "StoreExecutionError",
    "TranslationError",
    # Components
    "Settings",
    "IntentClassifier",
    "normalize",
    "StatementRepairer",
    "DateNormalizer",
    "EmployeeStore",
    "SmartExecutor",
    "FallbackGenerator",
    "Translator",
    "AnswerSummarizer",
    "TranscriptLog",
    "ChatPipeline",
    # Verifiers
    "Verifier",
    "VerificationChain",
    "ReadOnlyVerifier",
    "SingleStatementVerifier",
    # LLM
    "LLMInterface",
    "MockLLM",
    "OllamaLLM",
]
