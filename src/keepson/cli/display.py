"""CLI display and formatting functions."""

from __future__ import annotations

from ..search import NaturalSearchResult, Pagination
from ..store import Record

PREVIEW_LENGTH = 100


def _preview(text: str) -> str:
    preview = text[:PREVIEW_LENGTH].replace("\n", " ")
    if len(text) > PREVIEW_LENGTH:
        preview += "..."
    return preview


def format_record(record: Record, verbose: bool = False) -> str:
    """Format a record for display."""
    lines = []
    lines.append(f"[{record.type}] [{record.id}] {record.title}")

    meta = []
    if record.created_at:
        meta.append(f"created: {record.created_at:%Y-%m-%d %H:%M}")
    if record.file_ref:
        meta.append(f"file: {record.file_ref}")
    if meta:
        lines.append(f"  {' | '.join(meta)}")

    if record.tags:
        lines.append(f"  tags: {', '.join(record.tags)}")

    if verbose:
        if record.summary:
            lines.append(f"  summary: {record.summary}")
        if record.content:
            lines.append("")
            lines.append(record.content)
    elif record.summary:
        lines.append(f"  > {_preview(record.summary)}")

    return "\n".join(lines)


def format_pagination(pagination: Pagination) -> str:
    """One-line page footer, e.g. "Page 1 of 3 (45 records) | next: --page 2"."""
    line = (
        f"Page {pagination.current_page} of {max(pagination.total_pages, 1)} "
        f"({pagination.total_records} records)"
    )
    if pagination.has_next_page:
        line += f" | next: --page {pagination.current_page + 1}"
    return line


def format_search_header(result: NaturalSearchResult) -> str:
    """Header describing which tier answered a natural-language search."""
    lines = [f"=== {result.count} result(s) for \"{result.query}\" (tier: {result.tier}) ==="]

    hints = result.oracle_hints
    if hints is not None:
        if hints.keywords:
            lines.append(f"  keywords: {', '.join(hints.keywords)}")
        if hints.types:
            lines.append(f"  types: {', '.join(hints.types)}")
        if hints.date_filters and (hints.date_filters.from_ or hints.date_filters.to):
            lines.append(
                f"  dates: {hints.date_filters.from_ or '...'} to {hints.date_filters.to or '...'}"
            )

    return "\n".join(lines)
