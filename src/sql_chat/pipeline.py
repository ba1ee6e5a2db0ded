"""
Chat Pipeline
=============

Main controller for one chat turn: pre-filter, translate, check, repair and
execute, with an audit trail of every step.
"""

import time
from datetime import datetime, timezone

import structlog

from sql_chat.errors import SqlChatError, ValidationError
from sql_chat.executor import SmartExecutor
from sql_chat.fallback import FallbackGenerator
from sql_chat.intent import REJECTION_MESSAGE, IntentClassifier
from sql_chat.models import (
    AuditEntry,
    ChatReply,
    Intent,
    PipelineResult,
    StatementKind,
    VerificationResult,
    VerificationStatus,
)
from sql_chat.normalizer import normalize
from sql_chat.repair import StatementRepairer
from sql_chat.summarizer import AnswerSummarizer
from sql_chat.translator import Translator
from sql_chat.verifiers.base import VerificationChain

logger = structlog.get_logger(__name__)

NO_DATA_MESSAGE = "I couldn't find any data for that query."

# Outcome labels, also used as metric label values
OUTCOME_EXECUTED = "executed"
OUTCOME_EXECUTION_ERROR = "execution_error"
OUTCOME_NO_DATA = "no_data"
OUTCOME_INTENT_REJECTED = "intent_rejected"
OUTCOME_ACCESS_DENIED = "access_denied"
OUTCOME_ERROR = "error"


class ChatPipeline:
    """
    Orchestrates one chat turn end to end.

    The pipeline:
    1. Rejects write intent from unprivileged callers before any model call
    2. Produces a candidate statement (fallback patterns, then the translator)
    3. Normalizes and repairs the candidate
    4. Verifies it against the caller's verification chain
    5. Executes it and optionally summarizes the result
    6. Records every step in an audit trail

    It never raises: every failure becomes a reply.
    """

    def __init__(
        self,
        translator: Translator,
        executor: SmartExecutor,
        intent_classifier: IntentClassifier | None = None,
        fallback: FallbackGenerator | None = None,
        repairer: StatementRepairer | None = None,
        privileged_chain: VerificationChain | None = None,
        read_only_chain: VerificationChain | None = None,
        summarizer: AnswerSummarizer | None = None,
        use_fallback: bool = True,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            translator: Adapter around the LLM
            executor: Smart executor bound to the employee store
            intent_classifier: Pre-filter for unprivileged callers
            fallback: Pattern-based generator tried before the translator
            repairer: INSERT arity repairer
            privileged_chain: Verifiers for privileged callers
            read_only_chain: Verifiers for everyone else
            summarizer: Optional conversational summarizer for SELECT results
            use_fallback: Whether the fallback generator is consulted
        """
        self.translator = translator
        self.executor = executor
        self.intent_classifier = intent_classifier or IntentClassifier()
        self.fallback = fallback or FallbackGenerator()
        self.repairer = repairer or StatementRepairer()
        self.privileged_chain = privileged_chain or VerificationChain.for_privilege(True)
        self.read_only_chain = read_only_chain or VerificationChain.for_privilege(False)
        self.summarizer = summarizer
        self.use_fallback = use_fallback
        self.audit_trail: list[AuditEntry] = []

    def _log_audit(
        self,
        step: str,
        input_data: dict,
        output_data: dict,
        verification_results: list[VerificationResult] | None = None,
    ) -> None:
        """Add entry to audit trail."""
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            step=step,
            input_data=input_data,
            output_data=output_data,
            verification_results=verification_results or [],
        )
        self.audit_trail.append(entry)

    def _generate(self, utterance: str, privileged: bool) -> str:
        """Raw candidate text, from the fallback generator when it matches."""
        # Fallback output is write-only, so it is never offered to read-only callers
        if self.use_fallback and privileged:
            handled, sql = self.fallback.try_generate(utterance)
            if handled:
                self._log_audit(
                    step="fallback",
                    input_data={"utterance": utterance},
                    output_data={"sql": sql},
                )
                return sql

        raw = self.translator.translate(utterance, privileged)
        self._log_audit(
            step="translation",
            input_data={"utterance": utterance, "privileged": privileged},
            output_data={"raw": raw},
        )
        return raw

    def _verify(self, sql: str, privileged: bool) -> None:
        """
        Run the caller's verification chain.

        Raises:
            ValidationError: If any verifier fails
        """
        chain = self.privileged_chain if privileged else self.read_only_chain
        passed, results = chain.run(sql, {"privileged": privileged})

        self._log_audit(
            step="verification",
            input_data={"sql": sql},
            output_data={"passed": passed},
            verification_results=results,
        )

        if not passed:
            failed = next(r for r in results if r.status == VerificationStatus.FAILED)
            raise ValidationError(failed.message, command=failed.details.get("command"), sql=sql)

    def process(self, utterance: str, privileged: bool) -> PipelineResult:
        """
        Main entry point: answer one utterance.

        Args:
            utterance: The user's request in natural language
            privileged: Whether the caller may issue write statements

        Returns:
            PipelineResult with the reply, outcome label and audit trail
        """
        self.audit_trail = []  # Reset for new turn
        started = time.perf_counter()
        sql: str | None = None
        kind: StatementKind | None = None

        try:
            if not privileged and self.intent_classifier.classify(utterance) is Intent.WRITE:
                self._log_audit(
                    step="intent_rejection",
                    input_data={"utterance": utterance},
                    output_data={"intent": Intent.WRITE.value},
                )
                logger.info("write_intent_rejected")
                return self._finish(REJECTION_MESSAGE, None, OUTCOME_INTENT_REJECTED, None, started)

            raw = self._generate(utterance, privileged)
            candidate = normalize(raw)
            sql = self.repairer.repair(candidate.sql)
            kind = candidate.kind
            self._log_audit(
                step="normalization",
                input_data={"raw": raw},
                output_data={"sql": sql, "kind": kind.value},
            )

            self._verify(sql, privileged)

            result = self.executor.execute(sql)
            self._log_audit(
                step="execution",
                input_data={"sql": sql},
                output_data={
                    "kind": result.kind.value,
                    "rows_affected": result.rows_affected,
                    "error": result.error,
                },
            )

            if not result.success:
                return self._finish(result.text, sql, OUTCOME_EXECUTION_ERROR, kind, started)

            text = result.text
            if not text.strip():
                return self._finish(NO_DATA_MESSAGE, sql, OUTCOME_NO_DATA, kind, started)

            if self.summarizer is not None and result.kind is StatementKind.SELECT:
                text = self.summarizer.summarize(utterance, text)

            return self._finish(text, sql, OUTCOME_EXECUTED, kind, started)

        except ValidationError as e:
            logger.info("statement_denied", command=e.command)
            return self._finish(f"Access Denied: {e}", sql, OUTCOME_ACCESS_DENIED, kind, started)
        except SqlChatError as e:
            logger.warning("turn_failed", error=str(e))
            return self._finish(f"An error occurred: {e}", None, OUTCOME_ERROR, kind, started)
        except Exception as e:
            logger.exception("turn_failed_unexpectedly")
            return self._finish(f"An error occurred: {e}", None, OUTCOME_ERROR, kind, started)

    def _finish(
        self,
        text: str,
        sql: str | None,
        outcome: str,
        kind: StatementKind | None,
        started: float,
    ) -> PipelineResult:
        reply = ChatReply(
            response_text=text,
            sql_query_used=sql,
            timestamp_utc=datetime.now(timezone.utc),
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )
        self._log_audit(
            step="reply",
            input_data={},
            output_data={"outcome": outcome, "sql": sql},
        )
        return PipelineResult(
            reply=reply,
            outcome=outcome,
            statement_kind=kind,
            audit_trail=self.audit_trail,
        )
