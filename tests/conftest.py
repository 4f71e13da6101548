"""Centralized pytest fixtures and configuration.

This module provides shared fixtures for all tests, including:
- Database configuration with isolated temp directories
- Mock query oracles so no LLM is ever called
- Pre-populated database fixtures for search tests
"""

from __future__ import annotations

import tempfile
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

import pytest

from keepson.config import Config, LLMConfig, SearchConfig
from keepson.db import init_db
from keepson.oracle import OracleError, OracleHints

from helpers import BASE_TIME, OTHER_OWNER, OWNER

if TYPE_CHECKING:
    from collections.abc import Generator


# -----------------------------------------------------------------------------
# Mock Oracle Fixtures
# -----------------------------------------------------------------------------


class MockOracle:
    """Query oracle returning canned hints and recording every call.

    Implements the QueryOracleClient interface (extract_search_params).
    """

    def __init__(self, hints: Optional[OracleHints] = None) -> None:
        self.hints = hints if hints is not None else OracleHints()
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def extract_search_params(self, raw_query: str, known_types: Sequence[str]) -> OracleHints:
        """Record the call and return the configured hints."""
        self.calls.append((raw_query, tuple(known_types)))
        return self.hints

    @property
    def call_count(self) -> int:
        """Number of times the oracle was consulted."""
        return len(self.calls)


class FailingOracle(MockOracle):
    """Query oracle that always raises, like a timed-out LLM call."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        super().__init__()
        self.error = error if error is not None else OracleError("Oracle call failed: timed out")

    def extract_search_params(self, raw_query: str, known_types: Sequence[str]) -> OracleHints:
        self.calls.append((raw_query, tuple(known_types)))
        raise self.error


@pytest.fixture
def mock_oracle() -> MockOracle:
    """Oracle returning empty hints; tests set ``mock_oracle.hints`` as needed."""
    return MockOracle()


@pytest.fixture
def failing_oracle() -> FailingOracle:
    """Oracle that always raises."""
    return FailingOracle()


# -----------------------------------------------------------------------------
# Database Configuration Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Config, None, None]:
    """Create a temporary configuration for testing.

    This is the standard fixture for tests that need database access.
    No LLM backends are configured, so summaries use the fallback and
    natural search never reaches a real oracle.
    """
    config = Config(
        db_path=temp_dir / "test.db",
        search=SearchConfig(),
        oracle=LLMConfig(),
        summaries=LLMConfig(),
    )
    init_db(config)
    yield config


# -----------------------------------------------------------------------------
# Pre-populated Database Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_records(temp_config: Config) -> dict[str, str]:
    """Create sample records for OWNER (and one for OTHER_OWNER).

    Returns a dict mapping descriptive names to record IDs. Records are
    created a day apart, oldest first, so "newest first" order is known.
    """
    from keepson import core

    specs = [
        ("project_notes", dict(
            type="note",
            title="Keepson Structure",
            content="Folders are grouped by project and then by month.",
            tags=["project", "planning"],
        )),
        ("garden", dict(
            type="note",
            title="Garden plan",
            content="Plant the new plot with tomatoes and basil in spring.",
            tags=["garden"],
        )),
        ("beach_photo", dict(
            type="image",
            title="Beach sunset",
            file_ref="files/beach.jpg",
            metadata={"fileName": "beach.jpg", "fileType": "image/jpeg"},
            tags=["holiday"],
        )),
        ("article", dict(
            type="link",
            title="Regex cheat sheet",
            content="https://example.com/regex",
            summary="Covers a.b*c style patterns and escaping.",
            tags=["reference"],
        )),
    ]

    records = {}
    for offset, (name, fields) in enumerate(specs):
        records[name] = core.add_record(
            owner=OWNER,
            created_at=BASE_TIME + timedelta(days=offset),
            config=temp_config,
            **fields,
        )

    records["other_owner_note"] = core.add_record(
        owner=OTHER_OWNER,
        type="note",
        title="Keepson Structure",
        content="Bob's private copy of the structure notes.",
        created_at=BASE_TIME,
        config=temp_config,
    )
    return records
