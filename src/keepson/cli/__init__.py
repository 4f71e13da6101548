"""Command-line interface for keepson."""

from __future__ import annotations

import logging

import click

from .admin import admin
from .records import records
from .search import search


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging (search tiers, oracle timing)")
def main(verbose: bool):
    """keepson - Capture notes, media and links, then find them again.

    Commands are organized into three groups:

    \b
      admin    Database and configuration management
      records  Add, view, change and delete records
      search   Natural-language and structured search
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register command groups
main.add_command(admin)
main.add_command(records)
main.add_command(search)


if __name__ == "__main__":
    main()
