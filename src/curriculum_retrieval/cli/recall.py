"""Recall CLI commands for retrieving and viewing chunks."""

from __future__ import annotations

import json
import sys
from typing import Optional

import click

from .. import core
from ..search import NO_RESULTS_MESSAGE
from .display import format_chunk, format_match
from .utils import handle_errors, parse_keywords


@click.group()
def recall():
    """Retrieve and view chunks."""
    pass


@recall.command("retrieve")
@click.option("--board", "-b", required=True, help="Board name (case-insensitive)")
@click.option("--grade", "-g", required=True, help="Grade")
@click.option("--subject", "-s", required=True, help="Subject")
@click.option("--keyword", "-k", "keywords", multiple=True, help="Seed keyword (repeatable)")
@click.option("--keywords", "keywords_csv", help="Comma-separated seed keywords")
@click.option("--chapter", "chapter_id", help="Restrict to one chapter ID")
@click.option("--limit", "-n", type=int, help="Maximum chunks (default from config)")
@click.option("--verbose", "-v", is_flag=True, help="Show full chunk text")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def retrieve(
    board: str,
    grade: str,
    subject: str,
    keywords: tuple,
    keywords_csv: Optional[str],
    chapter_id: Optional[str],
    limit: Optional[int],
    verbose: bool,
    json_output: bool,
):
    """Retrieve the most relevant chunks for a board, grade and subject.

    Full-text search runs first; a plain substring match is used only when
    it finds nothing.

    \b
    Examples:
      curriculum-retrieval recall retrieve -b CBSE -g 5 -s Math -k fraction -k numerator
      curriculum-retrieval recall retrieve -b cbse -g 5 -s math --keywords "place value,rounding" --json
    """
    with handle_errors():
        response = core.retrieve_content(
            board=board,
            grade=grade,
            subject=subject,
            seed_keywords=parse_keywords(keywords, keywords_csv),
            chapter_id=chapter_id,
            limit=limit,
        )

    if json_output:
        click.echo(json.dumps(response.to_dict(), indent=2))
        return

    if not response.chunks:
        click.echo(NO_RESULTS_MESSAGE)
        return

    click.echo(f"Found {len(response.chunks)} chunks ({response.search_type} search):\n")
    for match in response.chunks:
        click.echo(format_match(match, verbose=verbose))
        click.echo()


@recall.command("chunk")
@click.argument("chunk_id")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def show_chunk(chunk_id: str, json_output: bool):
    """Show a chunk with its book, board and chapter."""
    chunk = core.get_chunk(chunk_id)

    if chunk is None:
        click.echo(f"Content chunk not found: {chunk_id}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(chunk.to_dict(), indent=2))
        return

    click.echo(format_chunk(chunk))


@recall.command("chunks")
@click.argument("book_id")
@click.option("--page", "-p", type=int, default=1, help="Page number")
@click.option("--per-page", type=int, default=50, help="Chunks per page")
@click.option("--verbose", "-v", is_flag=True, help="Show full chunk text")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def list_chunks(book_id: str, page: int, per_page: int, verbose: bool, json_output: bool):
    """List a book's chunks in chapter order."""
    with handle_errors():
        chunk_page = core.list_chunks_by_book(book_id, page=page, per_page=per_page)

    if json_output:
        click.echo(json.dumps(chunk_page.to_dict(), indent=2))
        return

    if not chunk_page.chunks:
        click.echo("No chunks found.")
        return

    click.echo(f"Page {chunk_page.page}/{chunk_page.pages} ({chunk_page.total} chunks):\n")
    for chunk in chunk_page.chunks:
        click.echo(format_chunk(chunk, verbose=verbose))
        click.echo()
