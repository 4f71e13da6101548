"""Record storage and filtered queries for keepson.

The store knows nothing about search tiers; it turns a ``RecordFilter`` into
SQL, always scoped to one owner, and hydrates rows into ``Record`` objects.
Text patterns handed to the store must already be escaped.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .config import Config, get_config
from .db import from_db_timestamp, get_db, to_db_timestamp

# Fields a text predicate may search
TEXT_FIELDS = ("title", "summary", "content", "tags")

# Public sort names -> SQL expressions
SORT_COLUMNS = {
    "createdAt": "r.created_at",
    "updatedAt": "r.updated_at",
    "title": "r.title COLLATE NOCASE",
    "type": "r.type",
}


@dataclass
class Record:
    """A captured item: note, image, audio, video or link."""
    id: str
    owner: str
    type: str
    title: str
    content: str = ""
    summary: str = ""
    tags: list[str] = field(default_factory=list)
    file_ref: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "id": self.id,
            "owner": self.owner,
            "type": self.type,
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "tags": list(self.tags),
            "fileRef": self.file_ref,
            "metadata": dict(self.metadata),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class TextMatch:
    """Match-any over escaped patterns across a set of fields."""
    patterns: set[str]
    fields: tuple[str, ...] = TEXT_FIELDS

    def __post_init__(self):
        unknown = set(self.fields) - set(TEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown text fields: {', '.join(sorted(unknown))}")


@dataclass
class RecordFilter:
    """Predicate for ``RecordStore.find_matching`` and ``RecordStore.count``.

    Every criterion is optional; the owner is supplied separately and is
    always applied. Date bounds are inclusive.
    """
    text: Optional[TextMatch] = None
    types: Optional[list[str]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    tags_all: Optional[list[str]] = None


@dataclass(frozen=True)
class Sort:
    """Sort order for record queries."""
    field: str = "createdAt"
    descending: bool = True

    def __post_init__(self):
        if self.field not in SORT_COLUMNS:
            raise ValueError(
                f"Unknown sort field: {self.field}. "
                f"Expected one of: {', '.join(SORT_COLUMNS)}"
            )


RECENT_FIRST = Sort()


def _alternation(patterns: set[str]) -> str:
    """Join escaped patterns into a single match-any expression."""
    # Sorted so identical pattern sets produce identical SQL parameters
    return "|".join(f"(?:{p})" for p in sorted(patterns))


def _build_filter_clauses(owner: str, predicate: RecordFilter) -> tuple[list[str], list]:
    """Build SQL WHERE clauses for a record filter.

    Args:
        owner: Owner every returned record must belong to.
        predicate: The filter to translate.

    Returns:
        Tuple of (list of SQL clause strings, list of parameters).
        Clauses do NOT include "WHERE" or "AND" prefix.
    """
    clauses = ["r.owner = ?"]
    params: list = [owner]

    text = predicate.text
    if text is not None:
        if not text.patterns:
            # An empty match-any set matches nothing
            clauses.append("0")
        else:
            regex = _alternation(text.patterns)
            field_clauses = []
            for name in text.fields:
                if name == "tags":
                    field_clauses.append("""
                        EXISTS (
                            SELECT 1 FROM record_tags t
                            WHERE t.record_id = r.id AND t.tag REGEXP ?
                        )
                    """)
                else:
                    field_clauses.append(f"r.{name} REGEXP ?")
                params.append(regex)
            clauses.append("(" + " OR ".join(field_clauses) + ")")

    if predicate.types:
        placeholders = ",".join("?" * len(predicate.types))
        clauses.append(f"r.type IN ({placeholders})")
        params.extend(predicate.types)

    if predicate.date_from is not None:
        clauses.append("r.created_at >= ?")
        params.append(to_db_timestamp(predicate.date_from))

    if predicate.date_to is not None:
        clauses.append("r.created_at <= ?")
        params.append(to_db_timestamp(predicate.date_to))

    if predicate.tags_all:
        tags = sorted(set(predicate.tags_all))
        placeholders = ",".join("?" * len(tags))
        clauses.append(f"""
            (
                SELECT COUNT(DISTINCT tag) FROM record_tags
                WHERE record_id = r.id AND tag IN ({placeholders})
            ) = ?
        """)
        params.extend(tags)
        params.append(len(tags))

    return clauses, params


def _fetch_tags(conn: sqlite3.Connection, record_ids: list[str]) -> dict[str, list[str]]:
    """Fetch tags for a batch of records."""
    tags: dict[str, list[str]] = {record_id: [] for record_id in record_ids}
    if not record_ids:
        return tags

    placeholders = ",".join("?" * len(record_ids))
    cursor = conn.execute(
        f"SELECT record_id, tag FROM record_tags WHERE record_id IN ({placeholders}) ORDER BY tag",
        record_ids,
    )
    for row in cursor.fetchall():
        tags[row["record_id"]].append(row["tag"])
    return tags


def _row_to_record(row: sqlite3.Row, tags: list[str]) -> Record:
    return Record(
        id=row["id"],
        owner=row["owner"],
        type=row["type"],
        title=row["title"],
        content=row["content"],
        summary=row["summary"],
        tags=tags,
        file_ref=row["file_ref"],
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        created_at=from_db_timestamp(row["created_at"]),
        updated_at=from_db_timestamp(row["updated_at"]),
    )


class RecordStore:
    """SQLite-backed record collection.

    Connections are opened per call, so one store can be shared freely.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config if config is not None else get_config()

    # --- Queries ---

    def find_matching(
        self,
        owner: str,
        predicate: RecordFilter,
        sort: Sort = RECENT_FIRST,
        skip: int = 0,
        limit: int = 20,
    ) -> list[Record]:
        """Return one page of the owner's records matching a predicate."""
        clauses, params = _build_filter_clauses(owner, predicate)
        direction = "DESC" if sort.descending else "ASC"
        query = f"""
            SELECT r.* FROM records r
            WHERE {' AND '.join(clauses)}
            ORDER BY {SORT_COLUMNS[sort.field]} {direction}, r.id {direction}
            LIMIT ? OFFSET ?
        """
        params.extend([limit, skip])

        with get_db(self.config) as conn:
            rows = conn.execute(query, params).fetchall()
            tags = _fetch_tags(conn, [row["id"] for row in rows])
            return [_row_to_record(row, tags[row["id"]]) for row in rows]

    def count(self, owner: str, predicate: RecordFilter) -> int:
        """Count the owner's records matching a predicate."""
        clauses, params = _build_filter_clauses(owner, predicate)
        query = f"SELECT COUNT(*) FROM records r WHERE {' AND '.join(clauses)}"

        with get_db(self.config) as conn:
            return conn.execute(query, params).fetchone()[0]

    # --- CRUD ---

    def insert(self, record: Record) -> None:
        """Insert a new record and its tags."""
        with get_db(self.config) as conn:
            conn.execute(
                """
                INSERT INTO records
                    (id, owner, type, title, content, summary, file_ref, metadata, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.owner,
                    record.type,
                    record.title,
                    record.content,
                    record.summary,
                    record.file_ref,
                    json.dumps(record.metadata) if record.metadata else None,
                    to_db_timestamp(record.created_at),
                    to_db_timestamp(record.updated_at),
                ),
            )
            if record.tags:
                conn.executemany(
                    "INSERT INTO record_tags (record_id, tag) VALUES (?, ?)",
                    [(record.id, tag) for tag in record.tags],
                )
            conn.commit()

    def get(self, owner: str, record_id: str) -> Optional[Record]:
        """Get one of the owner's records by ID."""
        with get_db(self.config) as conn:
            row = conn.execute(
                "SELECT * FROM records WHERE id = ? AND owner = ?",
                (record_id, owner),
            ).fetchone()
            if row is None:
                return None
            tags = _fetch_tags(conn, [record_id])
            return _row_to_record(row, tags[record_id])

    def update(
        self,
        owner: str,
        record_id: str,
        updated_at: datetime,
        title: Optional[str] = None,
        content: Optional[str] = None,
        summary: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> bool:
        """Update the mutable fields of a record.

        Returns:
            True if the record was updated, False if the owner has no such record.
        """
        updates = []
        params: list = []

        if title is not None:
            updates.append("title = ?")
            params.append(title)
        if content is not None:
            updates.append("content = ?")
            params.append(content)
        if summary is not None:
            updates.append("summary = ?")
            params.append(summary)

        updates.append("updated_at = ?")
        params.append(to_db_timestamp(updated_at))
        params.extend([record_id, owner])

        with get_db(self.config) as conn:
            cursor = conn.execute(
                f"UPDATE records SET {', '.join(updates)} WHERE id = ? AND owner = ?",
                params,
            )
            if cursor.rowcount == 0:
                return False

            # Tags are replaced wholesale
            if tags is not None:
                conn.execute("DELETE FROM record_tags WHERE record_id = ?", (record_id,))
                if tags:
                    conn.executemany(
                        "INSERT INTO record_tags (record_id, tag) VALUES (?, ?)",
                        [(record_id, tag) for tag in tags],
                    )

            conn.commit()

        return True

    def delete(self, owner: str, record_id: str) -> bool:
        """Delete one of the owner's records (tags cascade)."""
        with get_db(self.config) as conn:
            cursor = conn.execute(
                "DELETE FROM records WHERE id = ? AND owner = ?",
                (record_id, owner),
            )
            conn.commit()
            return cursor.rowcount > 0
