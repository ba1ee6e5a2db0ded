"""
Unit Tests for IntentClassifier
===============================

Tests for the write-intent pre-filter.
"""

import pytest

from sql_chat.config import IntentKeywords
from sql_chat.intent import IntentClassifier
from sql_chat.models import Intent


class TestWritePhrases:
    """Multi-word phrases flag write intent wherever they appear."""

    @pytest.mark.parametrize(
        "utterance",
        [
            "delete from employees where name is bob",
            "Could you INSERT INTO the table a new row",
            "I think we should drop table employees",
            "go ahead and truncate table employees",
        ],
    )
    def test_phrase_anywhere(self, intent_classifier: IntentClassifier, utterance: str) -> None:
        assert intent_classifier.classify(utterance) is Intent.WRITE


class TestWriteKeywords:
    """Single keywords need positional context."""

    def test_first_token(self, intent_classifier: IntentClassifier) -> None:
        assert intent_classifier.classify("Delete Bob Smith") is Intent.WRITE

    def test_preceded_by_please(self, intent_classifier: IntentClassifier) -> None:
        """Test the read-only rejection example: 'update' preceded by 'please'."""
        result = intent_classifier.classify("please update Alice's salary to 90000")
        assert result is Intent.WRITE

    @pytest.mark.parametrize("lead", ["to", "can", "i", "want", "need"])
    def test_preceded_by_leading_word(self, intent_classifier: IntentClassifier, lead: str) -> None:
        assert intent_classifier.classify(f"well {lead} remove the intern") is Intent.WRITE

    @pytest.mark.parametrize("obj", ["employee", "user", "record", "row", "from", "table"])
    def test_followed_by_object_word(self, intent_classifier: IntentClassifier, obj: str) -> None:
        assert intent_classifier.classify(f"now modify {obj} data") is Intent.WRITE

    def test_case_and_whitespace_ignored(self, intent_classifier: IntentClassifier) -> None:
        assert intent_classifier.classify("   CREATE a new hire   ") is Intent.WRITE


class TestReadBias:
    """Ambiguous utterances stay READ."""

    @pytest.mark.parametrize(
        "utterance",
        [
            "Show me all employees",
            "What is the average salary in Engineering?",
            "how did the salary change over time",
            "which departments saw a change in headcount",
            "list everyone hired in 2022",
        ],
    )
    def test_descriptive_reads(self, intent_classifier: IntentClassifier, utterance: str) -> None:
        assert intent_classifier.classify(utterance) is Intent.READ

    def test_empty_utterance(self, intent_classifier: IntentClassifier) -> None:
        assert intent_classifier.classify("") is Intent.READ
        assert intent_classifier.classify("   ") is Intent.READ

    def test_keyword_inside_word_is_not_a_token(self, intent_classifier: IntentClassifier) -> None:
        # 'updated' and 'address' are different tokens from 'update' and 'add'
        assert intent_classifier.classify("who updated their address recently") is Intent.READ


class TestCustomKeywords:
    """Keyword sets are injected data."""

    def test_custom_vocabulary(self) -> None:
        keywords = IntentKeywords(
            write_phrases=("wipe out",),
            write_keywords=frozenset({"purge"}),
            leading_words=frozenset(),
            object_words=frozenset(),
        )
        classifier = IntentClassifier(keywords)

        assert classifier.classify("wipe out the sales team") is Intent.WRITE
        assert classifier.classify("purge old records") is Intent.WRITE
        assert classifier.classify("delete from employees") is Intent.READ
