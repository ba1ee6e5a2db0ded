"""
Answer Summarizer
=================

Optional last step that turns a formatted result into a conversational
answer. Tabular requests bypass it and get the table verbatim.
"""

import structlog

from sql_chat.errors import TranslationError
from sql_chat.llm.base import LLMInterface

logger = structlog.get_logger(__name__)

SUMMARY_PROMPT = """Answer the user's question based on the employee data below. Be specific and include relevant details like department names, employee names, etc. from the original question.

Examples:
Question: What is the average salary in the Sales department?
Data: Average annual salary: $80,000
Answer: The average annual salary in the Sales department is $80,000.

Question: Who are the highest paid employees?
Data: Alice Johnson - $95,000, Charlie Brown - $110,000
Answer: The highest paid employees are Charlie Brown ($110,000) and Alice Johnson ($95,000).

User Question: {utterance}

Employee Data:
{data}

Answer:
"""

# Every word of a group must appear for the raw table to be returned
BYPASS_WORD_GROUPS = (
    ("show", "all", "employee"),
    ("list", "department"),
    ("average", "salary"),
    ("hired", "recently"),
    ("recent", "hire"),
    ("top", "employee"),
    ("list", "employee"),
    ("table", "employee"),
    ("show", "employee", "salary"),
    ("paid", "employee"),
    ("order by", "salary"),
)


class AnswerSummarizer:
    """Summarizes query results with an LLM."""

    def __init__(self, llm: LLMInterface) -> None:
        self.llm = llm

    @staticmethod
    def should_bypass(utterance: str) -> bool:
        text = utterance.lower()
        return any(all(word in text for word in group) for group in BYPASS_WORD_GROUPS)

    def summarize(self, utterance: str, data: str) -> str:
        """Answer the utterance from the data; falls back to the data on failure."""
        if self.should_bypass(utterance):
            return data

        try:
            response = self.llm.generate(SUMMARY_PROMPT.format(utterance=utterance, data=data))
        except TranslationError as e:
            logger.warning("summary_failed", error=str(e))
            return data

        answer = response.content.strip()
        return answer or data
