"""Info CLI commands for listing boards and books."""

from __future__ import annotations

import json
from typing import Optional

import click

from .. import core
from .display import ID_DISPLAY_LENGTH


@click.group()
def info():
    """List boards and books."""
    pass


@info.command("boards")
@click.option("--active-only", is_flag=True, help="Hide inactive boards")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def boards(active_only: bool, json_output: bool):
    """List curriculum boards."""
    board_list = core.list_boards(active_only=active_only)

    if json_output:
        output = {
            "boards": [
                {
                    "id": b.id,
                    "name": b.name,
                    "description": b.description,
                    "isActive": b.is_active,
                }
                for b in board_list
            ]
        }
        click.echo(json.dumps(output, indent=2))
        return

    if not board_list:
        click.echo("No boards found.")
        return

    click.echo("Boards:")
    for board in board_list:
        suffix = "" if board.is_active else " (inactive)"
        click.echo(f"  [{board.id[:ID_DISPLAY_LENGTH]}] {board.name}{suffix}")
        if board.description:
            click.echo(f"    {board.description}")


@info.command("books")
@click.option("--board", "board_id", help="Filter by board ID")
@click.option("--grade", "-g", help="Filter by grade (case-insensitive)")
@click.option("--subject", "-s", help="Filter by subject (case-insensitive)")
@click.option("--chapters", "show_chapters", is_flag=True, help="List each book's chapters")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable JSON output")
def books(
    board_id: Optional[str],
    grade: Optional[str],
    subject: Optional[str],
    show_chapters: bool,
    json_output: bool,
):
    """List books."""
    book_list = core.list_books(board_id=board_id, grade=grade, subject=subject)

    if json_output:
        output = {"books": []}
        for b in book_list:
            entry = {
                "id": b.id,
                "boardId": b.board_id,
                "title": b.title,
                "grade": b.grade,
                "subject": b.subject,
                "isActive": b.is_active,
            }
            if show_chapters:
                entry["chapters"] = [
                    {"id": c.id, "number": c.number, "title": c.title}
                    for c in core.list_chapters(b.id)
                ]
            output["books"].append(entry)
        click.echo(json.dumps(output, indent=2))
        return

    if not book_list:
        click.echo("No books found.")
        return

    click.echo("Books:")
    for book in book_list:
        suffix = "" if book.is_active else " (inactive)"
        click.echo(
            f"  [{book.id[:ID_DISPLAY_LENGTH]}] {book.title} "
            f"(grade {book.grade}, {book.subject}){suffix}"
        )
        if show_chapters:
            for chapter in core.list_chapters(book.id):
                click.echo(f"    {chapter.number}. {chapter.title} [{chapter.id}]")
