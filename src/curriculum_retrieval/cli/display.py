"""CLI display and formatting functions."""

from __future__ import annotations

from .. import core
from ..search import ChunkMatch


# ID display length (set high to show full IDs for copy-paste usability)
ID_DISPLAY_LENGTH = 100

# Characters of chunk text shown when not verbose
PREVIEW_LENGTH = 200


def _preview(text: str, verbose: bool) -> str:
    if verbose or len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH].rstrip() + "..."


def _pages(page_from, page_to) -> str:
    if page_from and page_to and page_from != page_to:
        return f"pp. {page_from}-{page_to}"
    if page_from or page_to:
        return f"p. {page_from or page_to}"
    return ""


def format_match(match: ChunkMatch, verbose: bool = False) -> str:
    """Format a retrieval match for display."""
    lines = []

    header = f"[{match.id[:ID_DISPLAY_LENGTH]}]"
    if match.relevance_score is not None:
        header += f" (score: {match.relevance_score:.3f})"
    header += f" {match.board_name} > {match.book.title}"
    if match.chapter:
        header += f" > Ch. {match.chapter.number}: {match.chapter.title}"
    lines.append(header)

    pages = _pages(match.page_from, match.page_to)
    meta = [f"grade: {match.book.grade}", f"subject: {match.book.subject}"]
    if pages:
        meta.append(pages)
    lines.append(f"  {' | '.join(meta)}")

    lines.append("")
    lines.append(_preview(match.text, verbose))

    return "\n".join(lines)


def format_chunk(chunk: core.ContentChunk, verbose: bool = True) -> str:
    """Format a stored chunk for display."""
    lines = [f"[{chunk.id[:ID_DISPLAY_LENGTH]}] chunk #{chunk.chunk_index}"]

    meta = []
    if chunk.book:
        meta.append(f"book: {chunk.book.title}")
        if chunk.board_name:
            meta.append(f"board: {chunk.board_name}")
    else:
        meta.append(f"book: {chunk.book_id[:ID_DISPLAY_LENGTH]}")
    if chunk.chapter:
        meta.append(f"chapter {chunk.chapter.number}: {chunk.chapter.title}")
    pages = _pages(chunk.page_from, chunk.page_to)
    if pages:
        meta.append(pages)
    lines.append(f"  {' | '.join(meta)}")

    lines.append("")
    lines.append(_preview(chunk.text, verbose))

    return "\n".join(lines)


def format_stats(stats: core.ContentStats) -> str:
    """Format corpus statistics for display."""
    lines = [
        f"Boards (active):  {stats.total_boards}",
        f"Books (active):   {stats.total_books}",
        f"Chapters:         {stats.total_chapters}",
        f"Chunks:           {stats.total_chunks}",
    ]
    if stats.books_by_board:
        lines.append("")
        lines.append("Books by board:")
        for board in stats.books_by_board:
            lines.append(f"  {board.name}: {board.book_count}")
    return "\n".join(lines)
