"""CLI utility functions."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Generator, Optional

import click

from ..errors import RetrievalError, StoreFailureError


def exit_code_for(error: RetrievalError) -> int:
    """Exit status for a retrieval error: 2 for store failures, 1 otherwise."""
    return 2 if isinstance(error, StoreFailureError) else 1


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Report RetrievalErrors on stderr and exit with the matching status."""
    try:
        yield
    except RetrievalError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(exit_code_for(e))


def parse_keywords(keywords: tuple, csv: Optional[str]) -> list[str]:
    """Merge repeated -k options with a comma-separated --keywords value."""
    merged = list(keywords)
    if csv:
        merged.extend(k for k in csv.split(",") if k.strip())
    return merged
