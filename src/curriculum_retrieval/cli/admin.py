"""Admin CLI commands for database setup, import and statistics."""

from __future__ import annotations

import json
from pathlib import Path

import click

from .. import core
from ..config import DEFAULT_CONFIG_PATH, get_config
from ..db import get_schema_version, init_db
from .display import format_stats
from .utils import handle_errors


@click.group()
def admin():
    """Database setup, import and statistics."""
    pass


@admin.command()
def init():
    """Initialize the database and configuration."""
    config = get_config()

    init_db(config)

    # Save default config if it doesn't exist
    if not DEFAULT_CONFIG_PATH.exists():
        config.save(DEFAULT_CONFIG_PATH)

    click.echo(f"Initialized curriculum-retrieval (schema v{get_schema_version(config)})")
    click.echo(f"  Database: {config.db_path}")
    click.echo(f"  Config: {DEFAULT_CONFIG_PATH}")


@admin.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_(path: Path):
    """Import boards, books, chapters and chunks from a YAML or JSON file.

    \b
    Example file:
      boards:
        - name: CBSE
          books:
            - title: Math Magic 5
              grade: "5"
              subject: Math
              chapters:
                - number: 1
                  title: Fractions
                  chunks:
                    - text: "A fraction names part of a whole."
                      page_from: 3
    """
    with handle_errors():
        counts = core.import_corpus(path)

    click.echo(
        f"Imported {counts['boards']} boards, {counts['books']} books, "
        f"{counts['chapters']} chapters, {counts['chunks']} chunks"
    )


@admin.command()
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def stats(json_output: bool):
    """Show corpus statistics."""
    with handle_errors():
        content_stats = core.get_content_stats()

    if json_output:
        click.echo(json.dumps(content_stats.to_dict(), indent=2))
        return

    click.echo(format_stats(content_stats))
