"""
Configuration
=============

Runtime settings and the immutable heuristic data shared by the pipeline
components.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings, read from SQL_CHAT_* environment variables or .env."""

    database_path: str = "local_company.db"
    transcript_path: str = "app.db"

    llm_base_url: str = "http://localhost:11434"
    llm_model: str = "phi3:3.8b"
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.0

    store_timeout_seconds: float = 5.0

    use_fallback_generator: bool = True
    summarize_results: bool = False

    environment: str = "development"

    model_config = SettingsConfigDict(
        env_prefix="SQL_CHAT_", env_file=".env", extra="ignore"
    )


@dataclass(frozen=True)
class IntentKeywords:
    """Vocabulary for the write-intent heuristic."""

    write_phrases: tuple[str, ...] = (
        "delete from",
        "remove from",
        "drop table",
        "drop database",
        "update set",
        "insert into",
        "add to",
        "create table",
        "alter table",
        "truncate table",
        "modify column",
        "change column",
        "edit record",
        "replace into",
    )
    write_keywords: frozenset[str] = frozenset({
        "delete", "remove", "drop", "update", "modify", "change", "insert",
        "add", "create", "alter", "truncate", "replace", "merge", "edit",
    })
    leading_words: frozenset[str] = frozenset({"to", "can", "please", "i", "want", "need"})
    object_words: frozenset[str] = frozenset({"employee", "user", "record", "row", "from", "table"})


@dataclass(frozen=True)
class CommandSets:
    """Leading SQL commands recognised by the statement validator."""

    read_commands: frozenset[str] = frozenset({
        "SELECT", "WITH", "SHOW", "DESCRIBE", "EXPLAIN", "PRAGMA",
    })
    write_commands: frozenset[str] = frozenset({
        "INSERT", "UPDATE", "DELETE", "DROP", "CREATE", "ALTER", "TRUNCATE",
        "REPLACE", "MERGE",
    })


@dataclass(frozen=True)
class DateLayouts:
    """strptime layouts tried, in order, before the generic date parser."""

    canonical: str = "%Y-%m-%d"
    alternates: tuple[str, ...] = (
        "%m/%d/%Y",
        "%d/%m/%Y",
        "%B %d, %Y",
        "%b %d, %Y",
        "%d-%m-%Y",
        "%m-%d-%Y",
        "%Y/%m/%d",
    )


DEFAULT_INTENT_KEYWORDS = IntentKeywords()
DEFAULT_COMMAND_SETS = CommandSets()
DEFAULT_DATE_LAYOUTS = DateLayouts()
