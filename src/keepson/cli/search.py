"""Search CLI commands."""

from __future__ import annotations

from typing import Optional

import click

from .. import core
from ..schema import RECORD_TYPES
from ..search import SearchError
from .display import format_pagination, format_record, format_search_header
from .utils import echo_json, fail, parse_tags, resolve_owner


@click.group()
def search():
    """Natural-language and structured search."""
    pass


@search.command("query")
@click.argument("query")
@click.option("--owner", help="Owner (defaults to config default_owner)")
@click.option("--verbose", "-v", is_flag=True, help="Show full summary and content")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def query_cmd(query: str, owner: Optional[str], verbose: bool, json_output: bool):
    """Find records with a natural-language QUERY.

    Tries a direct match first, then asks the configured query oracle for
    keywords, and falls back to locally generated patterns if the oracle
    is unavailable.

    \b
    Examples:
      keepson search query "keepson structure"
      keepson search query "photos from the beach last summer"
    """
    try:
        result = core.natural_search(resolve_owner(owner), query)
    except (ValueError, SearchError) as e:
        fail(str(e))

    if json_output:
        echo_json(result.to_dict())
        return

    click.echo(format_search_header(result))
    click.echo()

    if not result.records:
        click.echo("No results found.")
        return

    for record in result.records:
        click.echo(format_record(record, verbose))
        click.echo()


@search.command("advanced")
@click.option("--keyword", "-k", "keywords", multiple=True, help="Keyword (any may match title/summary/content)")
@click.option("--type", "-t", "types", multiple=True, type=click.Choice(RECORD_TYPES), help="Record type(s)")
@click.option("--tags", help="Comma-separated tags (all must be present)")
@click.option("--from", "date_from", help="Created on or after (ISO-8601)")
@click.option("--to", "date_to", help="Created on or before (ISO-8601)")
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--limit", "-n", default=20, show_default=True, help="Results per page")
@click.option("--sort-by", default="createdAt", show_default=True,
              type=click.Choice(["createdAt", "updatedAt", "title", "type"]))
@click.option("--order", "sort_order", default="desc", show_default=True, type=click.Choice(["asc", "desc"]))
@click.option("--owner", help="Owner (defaults to config default_owner)")
@click.option("--verbose", "-v", is_flag=True, help="Show full summary and content")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def advanced(
    keywords: tuple,
    types: tuple,
    tags: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
    page: int,
    limit: int,
    sort_by: str,
    sort_order: str,
    owner: Optional[str],
    verbose: bool,
    json_output: bool,
):
    """Search with structured filters and pagination.

    \b
    Examples:
      keepson search advanced -k roadmap -k budget --type note
      keepson search advanced --tags work,urgent --from 2024-01-01 --to 2024-03-31
    """
    try:
        result = core.advanced_search(
            owner=resolve_owner(owner),
            keywords=list(keywords),
            types=list(types),
            date_from=date_from,
            date_to=date_to,
            tags=parse_tags(tags),
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except (ValueError, SearchError) as e:
        fail(str(e))

    if json_output:
        echo_json(result.to_dict())
        return

    if not result.records:
        click.echo("No results found.")
        return

    for record in result.records:
        click.echo(format_record(record, verbose))
        click.echo()
    click.echo(format_pagination(result.pagination))
