"""Core API for keepson.

Every function here validates caller input (raising ``ValueError``) before
touching the store, and every read is scoped to the requesting owner.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from ulid import ULID

from .config import Config, get_config
from .db import init_db, utcnow
from .oracle import LLMQueryOracle, QueryOracleClient
from .schema import RECORD_TYPES
from .search import (
    AdvancedSearchQuery,
    AdvancedSearchResolver,
    AdvancedSearchResult,
    NaturalSearchResult,
    Pagination,
    SearchResolver,
    parse_date_bound,
)
from .store import Record, RecordFilter, RecordStore, Sort
from .summaries import TEXT_TYPES, fallback_summary, generate_summary, summarize_record
from .titles import derive_title

MAX_TITLE_LENGTH = 200


@dataclass
class RecordPage:
    """One page of an owner's records."""
    records: list[Record]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "pagination": self.pagination.to_dict(),
        }


def ensure_initialized(config: Optional[Config] = None) -> None:
    """Ensure the database is initialized."""
    if config is None:
        config = get_config()
    init_db(config)


def _resolve_tag_aliases(tags: list[str], config: Config) -> list[str]:
    """Normalize tags and resolve aliases to canonical forms."""
    resolved = []
    for tag in tags:
        tag_lower = tag.lower().strip()
        if not tag_lower:
            continue
        canonical = config.tag_aliases.get(tag_lower, tag_lower)
        if canonical not in resolved:
            resolved.append(canonical)
    return resolved


def _generate_id() -> str:
    """Generate a new ULID for a record."""
    return str(ULID())


def _validate_owner(owner: str) -> str:
    if not owner or not owner.strip():
        raise ValueError("Owner is required")
    return owner.strip()


def _validate_types(types: Optional[list[str]]) -> list[str]:
    validated = []
    for record_type in types or []:
        if record_type not in RECORD_TYPES:
            raise ValueError(
                f"Invalid record type: {record_type}. Expected one of: {', '.join(RECORD_TYPES)}"
            )
        if record_type not in validated:
            validated.append(record_type)
    return validated


def _validate_title(title: str) -> str:
    title = title.strip()
    if not 1 <= len(title) <= MAX_TITLE_LENGTH:
        raise ValueError(f"Title must be between 1 and {MAX_TITLE_LENGTH} characters")
    return title


def _validate_page(page: int, limit: int, config: Config) -> None:
    if page < 1:
        raise ValueError("Page must be at least 1")
    if not 1 <= limit <= config.search.max_limit:
        raise ValueError(f"Limit must be between 1 and {config.search.max_limit}")


def _parse_date(value: Optional[Union[str, datetime]], end_of_day: bool = False) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return parse_date_bound(value, end_of_day=end_of_day)
    except ValueError:
        raise ValueError(f"Invalid date format: {value!r} (expected ISO-8601)") from None


def _parse_sort_order(sort_order: Union[str, int]) -> bool:
    """Return True for descending order; accepts asc/desc and 1/-1."""
    normalized = str(sort_order).strip().lower()
    if normalized in ("desc", "descending", "-1"):
        return True
    if normalized in ("asc", "ascending", "1"):
        return False
    raise ValueError(f"Invalid sort order: {sort_order!r} (expected asc or desc)")


# --- CRUD Operations ---


def add_record(
    owner: str,
    type: str,
    title: Optional[str] = None,
    content: str = "",
    tags: Optional[list[str]] = None,
    file_ref: str = "",
    metadata: Optional[dict[str, Any]] = None,
    summary: Optional[str] = None,
    created_at: Optional[datetime] = None,
    config: Optional[Config] = None,
) -> str:
    """Add a new record.

    Args:
        owner: Owning user. Never changes afterwards.
        type: Record type (note, image, audio, video, link).
        title: Display title; derived from the file name, URL or content when blank.
        content: Note text or link URL; empty for file-backed types.
        tags: Optional list of tags.
        file_ref: Opaque reference to the stored file, if any.
        metadata: File metadata such as ``fileName``, ``fileSize``, ``fileType``.
        summary: Precomputed summary; generated when not given.
        created_at: Creation time, for imports. Defaults to now.
        config: Configuration to use.

    Returns:
        The generated record ID.
    """
    if config is None:
        config = get_config()

    owner = _validate_owner(owner)
    _validate_types([type])
    content = (content or "").strip()
    metadata = dict(metadata or {})

    if title and title.strip():
        title = _validate_title(title)
    else:
        title = derive_title(type, content, metadata.get("fileName"))

    if summary is None:
        summary = summarize_record(content, type, config)

    if created_at is None:
        created_at = utcnow()

    ensure_initialized(config)

    record = Record(
        id=_generate_id(),
        owner=owner,
        type=type,
        title=title,
        content=content,
        summary=summary,
        tags=_resolve_tag_aliases(tags or [], config),
        file_ref=file_ref,
        metadata=metadata,
        created_at=created_at,
        updated_at=created_at,
    )
    RecordStore(config).insert(record)
    return record.id


def get_record(owner: str, record_id: str, config: Optional[Config] = None) -> Optional[Record]:
    """Get one of the owner's records by ID.

    Returns:
        The record if found, None otherwise (including records of other owners).
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)
    return RecordStore(config).get(owner, record_id)


def list_records(
    owner: str,
    type: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: str = "createdAt",
    sort_order: Union[str, int] = "desc",
    config: Optional[Config] = None,
) -> RecordPage:
    """List the owner's records, newest first by default."""
    if config is None:
        config = get_config()

    if limit is None:
        limit = config.search.default_limit

    _validate_page(page, limit, config)
    types = _validate_types([type] if type else None)
    sort = Sort(sort_by, _parse_sort_order(sort_order))

    ensure_initialized(config)

    store = RecordStore(config)
    predicate = RecordFilter(types=types or None)
    records = store.find_matching(owner, predicate, sort, (page - 1) * limit, limit)
    total = store.count(owner, predicate)

    return RecordPage(records, Pagination.build(page, limit, len(records), total))


def update_record(
    owner: str,
    record_id: str,
    title: Optional[str] = None,
    content: Optional[str] = None,
    tags: Optional[list[str]] = None,
    config: Optional[Config] = None,
) -> bool:
    """Update an existing record.

    Changing the content of a note or link regenerates its summary. If the
    LLM fails, the previous summary is kept.

    Args:
        owner: Owning user.
        record_id: The record ID to update.
        title: New title (optional).
        content: New content (optional).
        tags: New tags (replaces existing).
        config: Configuration to use.

    Returns:
        True if record was updated, False if not found.
    """
    if config is None:
        config = get_config()

    if title is not None:
        title = _validate_title(title)
    if content is not None:
        content = content.strip()

    ensure_initialized(config)

    store = RecordStore(config)
    existing = store.get(owner, record_id)
    if existing is None:
        return False

    summary = None
    if content is not None and existing.type in TEXT_TYPES:
        if config.summaries.enabled:
            try:
                summary = generate_summary(content, existing.type, config)
            except (RuntimeError, ValueError, ImportError):
                summary = None  # keep existing summary
        else:
            summary = fallback_summary(content, existing.type)

    return store.update(
        owner,
        record_id,
        updated_at=utcnow(),
        title=title,
        content=content,
        summary=summary,
        tags=_resolve_tag_aliases(tags, config) if tags is not None else None,
    )


def delete_record(owner: str, record_id: str, config: Optional[Config] = None) -> bool:
    """Delete one of the owner's records.

    Returns:
        True if record was deleted, False if not found.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)
    return RecordStore(config).delete(owner, record_id)


# --- Search Operations ---


def natural_search(
    owner: str,
    query: str,
    oracle: Optional[QueryOracleClient] = None,
    config: Optional[Config] = None,
) -> NaturalSearchResult:
    """Search the owner's records with a free-text query.

    Args:
        owner: Owner whose records are searched.
        query: The natural-language query.
        oracle: Query oracle to use; defaults to the configured LLM oracle
            when one is configured.
        config: Configuration to use.

    Returns:
        Result with the tier that answered, its patterns and the records.

    Raises:
        ValueError: If the query is empty or too long.
        SearchError: If the search itself fails.
    """
    if config is None:
        config = get_config()

    owner = _validate_owner(owner)
    query = (query or "").strip()
    if not query:
        raise ValueError("Search query is required")
    if len(query) > config.search.max_query_length:
        raise ValueError(
            f"Search query must be between 1 and {config.search.max_query_length} characters"
        )

    if oracle is None and config.oracle.enabled:
        oracle = LLMQueryOracle(config)

    ensure_initialized(config)

    resolver = SearchResolver(RecordStore(config), oracle, limit=config.search.default_limit)
    return resolver.resolve(owner, query)


def advanced_search(
    owner: str,
    keywords: Optional[list[str]] = None,
    types: Optional[list[str]] = None,
    date_from: Optional[Union[str, datetime]] = None,
    date_to: Optional[Union[str, datetime]] = None,
    tags: Optional[list[str]] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: str = "createdAt",
    sort_order: Union[str, int] = "desc",
    config: Optional[Config] = None,
) -> AdvancedSearchResult:
    """Search the owner's records with structured filters.

    Date strings must be ISO-8601; a bare ``date_to`` date covers that whole
    day. Tags must all be present on a record for it to match.

    Raises:
        ValueError: On malformed filters.
        SearchError: If the search itself fails.
    """
    if config is None:
        config = get_config()

    if limit is None:
        limit = config.search.default_limit

    owner = _validate_owner(owner)
    _validate_page(page, limit, config)

    query = AdvancedSearchQuery(
        keywords=list(keywords or []),
        types=_validate_types(types),
        tags=_resolve_tag_aliases(tags or [], config),
        date_from=_parse_date(date_from),
        date_to=_parse_date(date_to, end_of_day=True),
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_descending=_parse_sort_order(sort_order),
    )
    # Unknown sort fields are rejected before the search starts
    Sort(query.sort_by, query.sort_descending)

    ensure_initialized(config)
    return AdvancedSearchResolver(RecordStore(config)).resolve(owner, query)
