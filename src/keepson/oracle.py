"""Query oracle: LLM extraction of structured search hints from free text."""

from __future__ import annotations

import logging
import re
import time
from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import Config, LLMConfig, get_config
from .llm import complete

logger = logging.getLogger(__name__)


ORACLE_SYSTEM_PROMPT = """You convert natural language search queries into structured search parameters.

Respond with a single JSON object and nothing else."""

ORACLE_PROMPT_TEMPLATE = """Convert this natural language search query into structured search parameters.

IMPORTANT: Keep phrases together. For example:
- "new plot" should return keywords: ["new plot"] not ["new", "plot"]
- "keepson structure" should return keywords: ["keepson structure"]
- If query is "find my meeting notes", return keywords: ["meeting notes"]
- For "I want to find that document called keepson", extract "keepson" as keyword

User Query: "{query}"

Return a JSON object with these fields:
- keywords: array of main search terms (keep phrases together)
- types: array of preferred record types, only from: {types}
- dateFilters: object with "from" and/or "to" ISO-8601 dates if a time range is mentioned, otherwise null
- context: additional context from the query, or null"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class OracleError(RuntimeError):
    """The oracle could not produce usable hints (timeout, API error, bad response)."""


class DateFilters(BaseModel):
    """Date range hint; bounds are unparsed strings."""
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class OracleHints(BaseModel):
    """Structured hints extracted from a natural-language query."""
    model_config = ConfigDict(populate_by_name=True)

    keywords: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    date_filters: Optional[DateFilters] = Field(default=None, alias="dateFilters")
    context: Optional[str] = None

    @field_validator("keywords", "types", mode="before")
    @classmethod
    def _null_list_is_empty(cls, value):
        return [] if value is None else value

    def to_dict(self) -> dict:
        """Serialize with the wire field names (``dateFilters``, ``from``)."""
        return self.model_dump(by_alias=True)


class QueryOracleClient(Protocol):
    """Anything that can turn a raw query into ``OracleHints`` or raise."""

    def extract_search_params(self, raw_query: str, known_types: Sequence[str]) -> OracleHints:
        ...


def decode_hints(raw: str) -> OracleHints:
    """Strictly decode an oracle response.

    A surrounding markdown code fence is removed; everything else must be a
    JSON object matching ``OracleHints``.

    Raises:
        OracleError: If the response is not valid JSON or fails validation.
    """
    text = raw.strip()
    match = _CODE_FENCE.match(text)
    if match:
        text = match.group(1)

    try:
        return OracleHints.model_validate_json(text)
    except ValidationError as e:
        raise OracleError(
            f"Malformed oracle response ({e.error_count()} validation error(s))"
        ) from e


class LLMQueryOracle:
    """Query oracle backed by the configured Anthropic/OpenAI model."""

    def __init__(self, config: Optional[Config] = None, llm: Optional[LLMConfig] = None):
        if llm is None:
            llm = (config if config is not None else get_config()).oracle
        self.llm = llm

    def extract_search_params(self, raw_query: str, known_types: Sequence[str]) -> OracleHints:
        prompt = ORACLE_PROMPT_TEMPLATE.format(query=raw_query, types=", ".join(known_types))

        started = time.monotonic()
        try:
            raw = complete(ORACLE_SYSTEM_PROMPT, prompt, self.llm, max_tokens=512)
        except Exception as e:
            raise OracleError(f"Oracle call failed: {e}") from e
        finally:
            logger.debug("Oracle call took %.3fs", time.monotonic() - started)

        logger.debug("Oracle raw response: %.200s", raw)
        return decode_hints(raw)
