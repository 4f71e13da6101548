"""Record CLI commands for adding, viewing and modifying records."""

from __future__ import annotations

import sys
from typing import Optional

import click

from .. import core
from ..schema import RECORD_TYPES
from .display import format_pagination, format_record
from .utils import echo_json, fail, parse_tags, resolve_owner


@click.group()
def records():
    """Add, view, change and delete records."""
    pass


@records.command("add")
@click.option("--type", "-t", "record_type", required=True, type=click.Choice(RECORD_TYPES),
              help="Record type")
@click.option("--title", help="Title (derived from content or file name when omitted)")
@click.option("--content", "-c", help="Note text or link URL (or use stdin for notes)")
@click.option("--tags", help="Comma-separated tags")
@click.option("--file-ref", default="", help="Reference to an already stored file")
@click.option("--file-name", help="Original file name, used for the title and metadata")
@click.option("--owner", help="Owner (defaults to config default_owner)")
def add(
    record_type: str,
    title: Optional[str],
    content: Optional[str],
    tags: Optional[str],
    file_ref: str,
    file_name: Optional[str],
    owner: Optional[str],
):
    """Add a new record.

    \b
    Examples:
      keepson records add -t note --title "Meeting notes" -c "Discussed the roadmap" --tags work
      keepson records add -t link -c https://example.com/article
      keepson records add -t image --file-ref s3://bucket/photo.jpg --file-name photo.jpg
    """
    # Read note content from stdin if not provided
    if content is None and record_type == "note" and not file_ref:
        if sys.stdin.isatty():
            click.echo("Enter content (Ctrl+D to finish):")
        content = sys.stdin.read().strip()

    metadata = {"fileName": file_name} if file_name else None

    try:
        record_id = core.add_record(
            owner=resolve_owner(owner),
            type=record_type,
            title=title,
            content=content or "",
            tags=parse_tags(tags),
            file_ref=file_ref,
            metadata=metadata,
        )
    except ValueError as e:
        fail(str(e))

    click.echo(f"Added record: {record_id}")


@records.command("show")
@click.argument("record_id")
@click.option("--owner", help="Owner (defaults to config default_owner)")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def show(record_id: str, owner: Optional[str], json_output: bool):
    """Show a record in full."""
    record = core.get_record(resolve_owner(owner), record_id)
    if record is None:
        fail(f"Record not found: {record_id}")

    if json_output:
        echo_json(record.to_dict())
    else:
        click.echo(format_record(record, verbose=True))


@records.command("list")
@click.option("--type", "-t", "record_type", type=click.Choice(RECORD_TYPES), help="Filter by type")
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--limit", "-n", default=20, show_default=True, help="Records per page")
@click.option("--sort-by", default="createdAt", show_default=True,
              type=click.Choice(["createdAt", "updatedAt", "title", "type"]))
@click.option("--order", "sort_order", default="desc", show_default=True, type=click.Choice(["asc", "desc"]))
@click.option("--owner", help="Owner (defaults to config default_owner)")
@click.option("--verbose", "-v", is_flag=True, help="Show full summary and content")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def list_cmd(
    record_type: Optional[str],
    page: int,
    limit: int,
    sort_by: str,
    sort_order: str,
    owner: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """List records, newest first."""
    try:
        result = core.list_records(
            owner=resolve_owner(owner),
            type=record_type,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValueError as e:
        fail(str(e))

    if json_output:
        echo_json(result.to_dict())
        return

    if not result.records:
        click.echo("No records found.")
        return

    for record in result.records:
        click.echo(format_record(record, verbose))
        click.echo()
    click.echo(format_pagination(result.pagination))


@records.command("update")
@click.argument("record_id")
@click.option("--title", help="New title")
@click.option("--content", "-c", help="New content (regenerates the summary for notes and links)")
@click.option("--tags", help="New comma-separated tags (replaces existing)")
@click.option("--owner", help="Owner (defaults to config default_owner)")
def update(record_id: str, title: Optional[str], content: Optional[str], tags: Optional[str], owner: Optional[str]):
    """Update a record's title, content or tags."""
    if title is None and content is None and tags is None:
        fail("Nothing to update: pass --title, --content or --tags")

    try:
        success = core.update_record(
            owner=resolve_owner(owner),
            record_id=record_id,
            title=title,
            content=content,
            tags=parse_tags(tags) if tags is not None else None,
        )
    except ValueError as e:
        fail(str(e))

    if success:
        click.echo(f"Updated record: {record_id}")
    else:
        fail(f"Record not found: {record_id}")


@records.command("delete")
@click.argument("record_id")
@click.option("--owner", help="Owner (defaults to config default_owner)")
def delete(record_id: str, owner: Optional[str]):
    """Delete a record."""
    if core.delete_record(resolve_owner(owner), record_id):
        click.echo(f"Deleted record: {record_id}")
    else:
        fail(f"Record not found: {record_id}")
