"""Contribute CLI commands for adding and removing corpus records."""

from __future__ import annotations

import sys
from typing import Optional

import click

from .. import core
from .display import ID_DISPLAY_LENGTH
from .utils import handle_errors


@click.group()
def contribute():
    """Add and remove boards, books, chapters and chunks."""
    pass


@contribute.command("add-board")
@click.argument("name")
@click.option("--description", "-d", help="Board description")
@click.option("--inactive", is_flag=True, help="Create the board deactivated")
def add_board(name: str, description: Optional[str], inactive: bool):
    """Add a curriculum board."""
    with handle_errors():
        board_id = core.add_board(name, description=description, is_active=not inactive)
    click.echo(f"Added board: {board_id}")


@contribute.command("add-book")
@click.option("--board", "board_id", required=True, help="Board ID")
@click.option("--title", required=True, help="Book title")
@click.option("--grade", required=True, help="Grade (e.g. 5)")
@click.option("--subject", required=True, help="Subject (e.g. Math)")
@click.option("--inactive", is_flag=True, help="Create the book deactivated")
def add_book(board_id: str, title: str, grade: str, subject: str, inactive: bool):
    """Add a book under a board."""
    with handle_errors():
        book_id = core.add_book(board_id, title, grade, subject, is_active=not inactive)
    click.echo(f"Added book: {book_id}")


@contribute.command("add-chapter")
@click.option("--book", "book_id", required=True, help="Book ID")
@click.option("--number", "-n", type=int, required=True, help="Chapter number")
@click.option("--title", required=True, help="Chapter title")
def add_chapter(book_id: str, number: int, title: str):
    """Add a chapter to a book."""
    with handle_errors():
        chapter_id = core.add_chapter(book_id, number, title)
    click.echo(f"Added chapter: {chapter_id}")


@contribute.command("add-chunk")
@click.option("--book", "book_id", required=True, help="Book ID")
@click.option("--chapter", "chapter_id", help="Chapter ID (must belong to the book)")
@click.option("--text", "-c", help="Chunk text (or use stdin)")
@click.option("--page-from", type=int, help="First page")
@click.option("--page-to", type=int, help="Last page")
@click.option("--index", "chunk_index", type=int, default=0, help="Ordering hint within the chapter")
def add_chunk(
    book_id: str,
    chapter_id: Optional[str],
    text: Optional[str],
    page_from: Optional[int],
    page_to: Optional[int],
    chunk_index: int,
):
    """Add a content chunk to a book.

    \b
    Examples:
      curriculum-retrieval contribute add-chunk --book BOOK_ID -c "A fraction names part of a whole."
      cat page3.txt | curriculum-retrieval contribute add-chunk --book BOOK_ID --page-from 3
    """
    # Read text from stdin if not provided
    if text is None:
        if sys.stdin.isatty():
            click.echo("Enter chunk text (Ctrl+D to finish):")
        text = sys.stdin.read().strip()

    with handle_errors():
        chunk_id = core.add_chunk(
            book_id,
            text,
            chapter_id=chapter_id,
            page_from=page_from,
            page_to=page_to,
            chunk_index=chunk_index,
        )
    click.echo(f"Added chunk: {chunk_id}")


@contribute.command("update-chunk")
@click.argument("chunk_id")
@click.option("--text", "-c", help="New chunk text")
@click.option("--chapter", "chapter_id", help="Move to this chapter")
@click.option("--no-chapter", "clear_chapter", is_flag=True, help="Detach from its chapter")
@click.option("--page-from", type=int, help="First page")
@click.option("--page-to", type=int, help="Last page")
@click.option("--index", "chunk_index", type=int, help="Ordering hint within the chapter")
def update_chunk(
    chunk_id: str,
    text: Optional[str],
    chapter_id: Optional[str],
    clear_chapter: bool,
    page_from: Optional[int],
    page_to: Optional[int],
    chunk_index: Optional[int],
):
    """Update a content chunk."""
    with handle_errors():
        updated = core.update_chunk(
            chunk_id,
            text=text,
            chapter_id=chapter_id,
            clear_chapter=clear_chapter,
            page_from=page_from,
            page_to=page_to,
            chunk_index=chunk_index,
        )

    if updated:
        click.echo(f"Updated chunk: {chunk_id}")
    else:
        click.echo(f"Chunk not found: {chunk_id}", err=True)
        sys.exit(1)


@contribute.command("delete-chunk")
@click.argument("chunk_id")
def delete_chunk(chunk_id: str):
    """Delete a content chunk."""
    if core.delete_chunk(chunk_id):
        click.echo(f"Deleted chunk: {chunk_id}")
    else:
        click.echo(f"Chunk not found: {chunk_id}", err=True)
        sys.exit(1)


@contribute.command("delete-book-chunks")
@click.argument("book_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def delete_book_chunks(book_id: str, yes: bool):
    """Delete every chunk of a book."""
    if not yes:
        click.confirm(f"Delete all chunks of book {book_id[:ID_DISPLAY_LENGTH]}?", abort=True)

    count = core.delete_chunks_by_book(book_id)
    click.echo(f"Deleted {count} chunks")


@contribute.command("set-active")
@click.option("--type", "-t", "entity_type", required=True, type=click.Choice(["board", "book"]),
              help="Entity type")
@click.argument("entity_id")
@click.argument("state", type=click.Choice(["on", "off"]))
def set_active(entity_type: str, entity_id: str, state: str):
    """Activate or deactivate a board or book.

    Inactive boards and books are invisible to retrieval.
    """
    active = state == "on"
    if entity_type == "board":
        found = core.set_board_active(entity_id, active)
    else:
        found = core.set_book_active(entity_id, active)

    if not found:
        click.echo(f"{entity_type.capitalize()} not found: {entity_id}", err=True)
        sys.exit(1)

    click.echo(f"{entity_type.capitalize()} {entity_id} {'activated' if active else 'deactivated'}")
