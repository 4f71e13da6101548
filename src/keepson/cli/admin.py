"""Admin CLI commands for database and configuration management."""

from __future__ import annotations

import click

from ..config import DEFAULT_CONFIG_PATH, DEFAULT_KEEPSON_DIR, get_config
from ..db import get_schema_version, init_db


@click.group()
def admin():
    """Database and configuration management commands."""
    pass


@admin.command()
def init():
    """Initialize the database and configuration."""
    config = get_config()

    # Create config directory
    DEFAULT_KEEPSON_DIR.mkdir(parents=True, exist_ok=True)

    # Initialize database
    init_db(config)

    # Save default config if it doesn't exist
    if not DEFAULT_CONFIG_PATH.exists():
        config.save(DEFAULT_CONFIG_PATH)

    click.echo(f"Initialized keepson at {DEFAULT_KEEPSON_DIR}")
    click.echo(f"  Database: {config.db_path} (schema v{get_schema_version(config)})")
    click.echo(f"  Config: {DEFAULT_CONFIG_PATH}")
    if not config.oracle.enabled:
        click.secho(
            "  Query oracle not configured: natural search will use local patterns only.",
            dim=True,
        )
