"""Search functionality for keepson.

Natural-language search is resolved in three strictly sequential tiers:

1. direct: the raw query as a literal substring of title, summary, content
   or tags. Any hit ends the search without consulting the oracle.
2. enhanced: the query oracle turns the query into keywords, type and date
   hints; keywords are expanded into partial-match patterns. Whatever this
   tier finds, including nothing, is the answer.
3. fallback: only when the oracle is unavailable or raised. Patterns are
   generated locally from the query alone.

Advanced search is a single structured query with pagination and no tiers.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional, Sequence

from .oracle import DateFilters, OracleHints, QueryOracleClient
from .patterns import escape_all, escape_pattern, expand_keyword, generate_all_patterns, strip_whitespace
from .schema import RECORD_TYPES
from .store import RECENT_FIRST, TEXT_FIELDS, Record, RecordFilter, RecordStore, Sort, TextMatch

logger = logging.getLogger(__name__)


DEFAULT_RESULT_LIMIT = 20

TIER_DIRECT = "direct"
TIER_ENHANCED = "enhanced"
TIER_FALLBACK = "fallback"

# Advanced keyword search does not look at tags
ADVANCED_KEYWORD_FIELDS = ("title", "summary", "content")


class SearchError(RuntimeError):
    """Generic search failure; details are logged, never exposed."""


@dataclass
class NaturalSearchResult:
    """Outcome of a tiered natural-language search."""
    tier: str
    query: str
    records: list[Record]
    patterns: set[str] = field(default_factory=set)  # escaped, as sent to the store
    oracle_hints: Optional[OracleHints] = None  # only set for the enhanced tier

    @property
    def count(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "tier": self.tier,
            "query": self.query,
            "records": [r.to_dict() for r in self.records],
            "count": self.count,
            "patterns": sorted(self.patterns),
        }
        if self.oracle_hints is not None:
            data["oracleHints"] = self.oracle_hints.to_dict()
        return data


@dataclass
class Pagination:
    """Page descriptor shared by advanced search and record listing."""
    current_page: int
    total_pages: int
    total_records: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, returned: int, total: int) -> "Pagination":
        skip = (page - 1) * limit
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_records=total,
            has_next_page=skip + returned < total,
            has_previous_page=page > 1,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalRecords": self.total_records,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }


@dataclass
class AdvancedSearchQuery:
    """Structured search filters. Empty lists and None mean "no filter"."""
    keywords: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    page: int = 1
    limit: int = DEFAULT_RESULT_LIMIT
    sort_by: str = "createdAt"
    sort_descending: bool = True

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("Page must be at least 1")
        if self.limit < 1:
            raise ValueError("Limit must be at least 1")

    def filters(self) -> dict[str, Any]:
        """Echo of the applied filters."""
        return {
            "keywords": list(self.keywords),
            "types": list(self.types),
            "dateFrom": self.date_from.isoformat() if self.date_from else None,
            "dateTo": self.date_to.isoformat() if self.date_to else None,
            "tags": list(self.tags),
        }


@dataclass
class AdvancedSearchResult:
    """One page of advanced search results."""
    records: list[Record]
    pagination: Pagination
    filters: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "pagination": self.pagination.to_dict(),
            "filters": self.filters,
        }


# --- Helper Functions ---


def parse_date_bound(value: str, end_of_day: bool = False) -> datetime:
    """Parse an ISO-8601 date or datetime string.

    A bare date becomes midnight, or the last microsecond of that day when
    ``end_of_day`` is set, so that an upper bound covers the whole day.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    try:
        day = date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text)

    return datetime.combine(day, time.max if end_of_day else time.min)


def _hint_date_bounds(date_filters: Optional[DateFilters]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Turn oracle date hints into bounds, dropping any bound that won't parse."""
    if date_filters is None:
        return None, None

    bounds: list[Optional[datetime]] = []
    for name, value, end_of_day in (
        ("from", date_filters.from_, False),
        ("to", date_filters.to, True),
    ):
        if not value:
            bounds.append(None)
            continue
        try:
            bounds.append(parse_date_bound(value, end_of_day=end_of_day))
        except ValueError:
            logger.warning("Ignoring malformed '%s' date from oracle: %r", name, value)
            bounds.append(None)

    return bounds[0], bounds[1]


# --- Resolvers ---


class SearchResolver:
    """Tiered natural-language search.

    Holds only injected collaborators; every request's state lives on the
    stack, so one resolver may serve concurrent requests.

    Args:
        store: Record store to query.
        oracle: Query oracle; None means the oracle is unavailable and the
            fallback tier replaces the enhanced one.
        limit: Maximum records returned by any tier.
        known_types: Record types the oracle may restrict to.
    """

    def __init__(
        self,
        store: RecordStore,
        oracle: Optional[QueryOracleClient] = None,
        limit: int = DEFAULT_RESULT_LIMIT,
        known_types: Sequence[str] = RECORD_TYPES,
    ):
        self.store = store
        self.oracle = oracle
        self.limit = limit
        self.known_types = tuple(known_types)

    def resolve(self, owner: str, raw_query: str) -> NaturalSearchResult:
        """Run the tiers for one query.

        Raises:
            ValueError: If the query is empty after trimming.
            SearchError: On any failure other than an oracle failure.
        """
        query = raw_query.strip()
        if not query:
            raise ValueError("Search query is required")

        try:
            result = self._resolve(owner, query)
        except Exception as e:
            logger.exception("Natural search failed for query %r", query)
            raise SearchError("Search failed") from e

        logger.info(
            "Search tier '%s' returned %d record(s) using %d pattern(s)",
            result.tier, result.count, len(result.patterns),
        )
        return result

    def _resolve(self, owner: str, query: str) -> NaturalSearchResult:
        result = self._direct(owner, query)
        if result.records:
            return result

        if self.oracle is None:
            logger.debug("No query oracle configured")
            return self._fallback(owner, query)

        try:
            hints = self.oracle.extract_search_params(query, self.known_types)
        except Exception as e:
            # Any oracle failure is recoverable
            logger.warning("Query oracle failed, falling back to local patterns: %s", e)
            return self._fallback(owner, query)

        return self._enhanced(owner, query, hints)

    def _find(self, owner: str, predicate: RecordFilter) -> list[Record]:
        return self.store.find_matching(owner, predicate, RECENT_FIRST, 0, self.limit)

    def _direct(self, owner: str, query: str) -> NaturalSearchResult:
        patterns = {escape_pattern(query)}
        records = self._find(owner, RecordFilter(text=TextMatch(patterns, TEXT_FIELDS)))
        return NaturalSearchResult(TIER_DIRECT, query, records, patterns)

    def _enhanced(self, owner: str, query: str, hints: OracleHints) -> NaturalSearchResult:
        raw_patterns: set[str] = set()
        for keyword in hints.keywords:
            raw_patterns |= expand_keyword(keyword)
        if not raw_patterns:
            raw_patterns = {query, strip_whitespace(query)}
        patterns = escape_all(raw_patterns)

        types = []
        for hinted in hints.types:
            hinted = hinted.strip().lower()
            if hinted in self.known_types and hinted not in types:
                types.append(hinted)
            elif hinted not in self.known_types:
                logger.debug("Ignoring unknown record type from oracle: %r", hinted)

        date_from, date_to = _hint_date_bounds(hints.date_filters)

        predicate = RecordFilter(
            text=TextMatch(patterns, TEXT_FIELDS),
            types=types or None,
            date_from=date_from,
            date_to=date_to,
        )
        records = self._find(owner, predicate)
        return NaturalSearchResult(TIER_ENHANCED, query, records, patterns, hints)

    def _fallback(self, owner: str, query: str) -> NaturalSearchResult:
        patterns = escape_all(generate_all_patterns(query))
        records = self._find(owner, RecordFilter(text=TextMatch(patterns, TEXT_FIELDS)))
        return NaturalSearchResult(TIER_FALLBACK, query, records, patterns)


class AdvancedSearchResolver:
    """Structured filter search with pagination."""

    def __init__(self, store: RecordStore):
        self.store = store

    def resolve(self, owner: str, query: AdvancedSearchQuery) -> AdvancedSearchResult:
        """Run one structured search.

        Raises:
            ValueError: If the sort field is unknown.
            SearchError: If the store fails.
        """
        sort = Sort(query.sort_by, query.sort_descending)

        keywords = [k.strip() for k in query.keywords if k and k.strip()]
        predicate = RecordFilter(
            text=TextMatch(escape_all(keywords), ADVANCED_KEYWORD_FIELDS) if keywords else None,
            types=query.types or None,
            date_from=query.date_from,
            date_to=query.date_to,
            tags_all=query.tags or None,
        )
        skip = (query.page - 1) * query.limit

        try:
            records = self.store.find_matching(owner, predicate, sort, skip, query.limit)
            total = self.store.count(owner, predicate)
        except Exception as e:
            logger.exception("Advanced search failed")
            raise SearchError("Search failed") from e

        return AdvancedSearchResult(
            records=records,
            pagination=Pagination.build(query.page, query.limit, len(records), total),
            filters=query.filters(),
        )
