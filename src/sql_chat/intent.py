"""
Intent Classifier
=================

Cheap heuristic pass over the raw utterance that flags write intent before
any SQL is generated, so unprivileged callers can be turned away without a
translator round-trip.

The rule is biased toward READ when ambiguous: a false WRITE blocks a
legitimate read, while a missed WRITE is still caught by the read-only
verifier further down the pipeline.
"""

import re

from sql_chat.config import DEFAULT_INTENT_KEYWORDS, IntentKeywords
from sql_chat.models import Intent

REJECTION_MESSAGE = (
    "I understand you want to modify data, but as a non-admin user, you only "
    "have read-only access. I can help you query and view data using SELECT "
    "statements. For data modifications, please contact an administrator."
)

_TOKEN_SPLIT = re.compile(r"\W+")


class IntentClassifier:
    """Classifies an utterance as read or write intent."""

    def __init__(self, keywords: IntentKeywords = DEFAULT_INTENT_KEYWORDS) -> None:
        self.keywords = keywords

    def classify(self, utterance: str) -> Intent:
        """
        Classify an utterance.

        Args:
            utterance: Raw text from the caller

        Returns:
            Intent.WRITE if the text looks like a data modification request
        """
        if not utterance or not utterance.strip():
            return Intent.READ

        text = utterance.strip().lower()

        if any(phrase in text for phrase in self.keywords.write_phrases):
            return Intent.WRITE

        words = [w for w in _TOKEN_SPLIT.split(text) if w]
        for i, word in enumerate(words):
            if word not in self.keywords.write_keywords:
                continue
            if i == 0:
                return Intent.WRITE
            if words[i - 1] in self.keywords.leading_words:
                return Intent.WRITE
            if i + 1 < len(words) and words[i + 1] in self.keywords.object_words:
                return Intent.WRITE

        return Intent.READ
