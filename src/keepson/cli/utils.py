"""CLI utility functions."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn, Optional

import click

from ..config import get_config


def parse_tags(tags: Optional[str]) -> Optional[list[str]]:
    """Parse comma-separated tags string."""
    if not tags:
        return None
    return [t.strip() for t in tags.split(",") if t.strip()]


def resolve_owner(owner: Optional[str]) -> str:
    """Use the explicit --owner, else the configured default owner."""
    return owner or get_config().default_owner


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)
