"""Test helper utilities.

This module provides helper functions for writing tests, including:
- Assertion helpers for validating records and results
- Factory helpers for creating test data
- Database helpers for inspecting state
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from keepson.config import Config


OWNER = "alice"
OTHER_OWNER = "bob"

# Fixed base time so date-filter tests are deterministic
BASE_TIME = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


# -----------------------------------------------------------------------------
# Assertion Helpers
# -----------------------------------------------------------------------------


def assert_record_matches(record: Any, expected: dict[str, Any]) -> None:
    """Assert that a record matches expected values.

    Args:
        record: Record object to check (from core.get_record)
        expected: Dict of field name -> expected value

    Raises:
        AssertionError: If any field doesn't match

    Example:
        record = core.get_record(owner, record_id, config=config)
        assert_record_matches(record, {
            "title": "My Note",
            "type": "note",
        })
    """
    assert record is not None, "Record is None"

    for field, value in expected.items():
        actual = getattr(record, field, None)
        if field == "tags":
            # Compare as sets for order-independence
            assert set(actual or []) == set(value), f"Record.{field}: expected {value}, got {actual}"
        else:
            assert actual == value, f"Record.{field}: expected {value}, got {actual}"


def result_ids(result: Any) -> list[str]:
    """IDs of the records in a search result or page, in order."""
    return [record.id for record in result.records]


def assert_newest_first(records: list[Any]) -> None:
    """Assert records are ordered by creation time, newest first."""
    times = [record.created_at for record in records]
    assert times == sorted(times, reverse=True), f"Not newest first: {times}"


# -----------------------------------------------------------------------------
# Factory Helpers
# -----------------------------------------------------------------------------


def create_notes(
    config: Config,
    owner: str,
    count: int,
    start: datetime,
    title_prefix: str = "Note",
    tags: Optional[list[str]] = None,
) -> list[str]:
    """Create ``count`` notes an hour apart, oldest first.

    Returns:
        Record IDs in creation order.
    """
    from keepson import core

    return [
        core.add_record(
            owner=owner,
            type="note",
            title=f"{title_prefix} {i:02d}",
            content=f"Body of {title_prefix.lower()} number {i}",
            tags=tags,
            created_at=start + timedelta(hours=i),
            config=config,
        )
        for i in range(count)
    ]


# -----------------------------------------------------------------------------
# Database Helpers
# -----------------------------------------------------------------------------


def count_rows(config: Config, table: str) -> int:
    """Count rows in a table."""
    from keepson.db import get_db

    with get_db(config) as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def get_tags(config: Config, record_id: str) -> list[str]:
    """Get a record's stored tags, sorted."""
    from keepson.db import get_db

    with get_db(config) as conn:
        rows = conn.execute(
            "SELECT tag FROM record_tags WHERE record_id = ? ORDER BY tag",
            (record_id,),
        ).fetchall()
        return [row[0] for row in rows]
