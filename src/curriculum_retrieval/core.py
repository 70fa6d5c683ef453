"""Core API for curriculum-retrieval."""

from __future__ import annotations

import logging
import math
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml
from ulid import ULID

from .config import Config, get_config
from .db import casefold, execute_query, get_db, init_db
from .errors import StoreFailureError, ValidationError
from .search import (
    DEFAULT_STRATEGIES,
    RetrievalResponse,
    SearchStrategy,
    find_active_board,
    normalize_keywords,
    normalize_limit,
    resolve_scope,
    run_strategies,
)

logger = logging.getLogger(__name__)

SCOPE_REQUIRED_MESSAGE = "Board, grade, and subject are required"


@dataclass
class Board:
    """A curriculum board (e.g. CBSE)."""
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Book:
    """A textbook for one grade and subject under a board."""
    id: str
    board_id: str
    title: str
    grade: str
    subject: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Chapter:
    """A chapter within a book."""
    id: str
    book_id: str
    number: int
    title: str


@dataclass
class ContentChunk:
    """A retrievable chunk of book text."""
    id: str
    book_id: str
    text: str
    chapter_id: Optional[str] = None
    page_from: Optional[int] = None
    page_to: Optional[int] = None
    chunk_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Populated when fetching with parent info
    chapter: Optional[Chapter] = None
    book: Optional[Book] = None
    board_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        data: dict[str, Any] = {
            "id": self.id,
            "bookId": self.book_id,
            "chapterId": self.chapter_id,
            "text": self.text,
            "pageFrom": self.page_from,
            "pageTo": self.page_to,
            "chunkIndex": self.chunk_index,
            "createdAt": str(self.created_at) if self.created_at else None,
            "updatedAt": str(self.updated_at) if self.updated_at else None,
        }
        if self.book is not None:
            data["book"] = {
                "id": self.book.id,
                "title": self.book.title,
                "grade": self.book.grade,
                "subject": self.book.subject,
                "board": {"name": self.board_name},
            }
        if self.chapter is not None:
            data["chapter"] = {
                "id": self.chapter.id,
                "number": self.chapter.number,
                "title": self.chapter.title,
            }
        return data


@dataclass
class ChunkPage:
    """One page of a book's chunks."""
    chunks: list[ContentChunk]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "pagination": {
                "page": self.page,
                "limit": self.per_page,
                "total": self.total,
                "pages": self.pages,
            },
        }


@dataclass
class BoardBookCount:
    """Number of books under an active board."""
    id: str
    name: str
    book_count: int


@dataclass
class ContentStats:
    """Corpus statistics."""
    total_boards: int
    total_books: int
    total_chapters: int
    total_chunks: int
    books_by_board: list[BoardBookCount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalBoards": self.total_boards,
            "totalBooks": self.total_books,
            "totalChapters": self.total_chapters,
            "totalChunks": self.total_chunks,
            "booksByBoard": [
                {"id": b.id, "name": b.name, "bookCount": b.book_count}
                for b in self.books_by_board
            ],
        }


def ensure_initialized(config: Optional[Config] = None) -> None:
    """Ensure the database is initialized."""
    if config is None:
        config = get_config()
    init_db(config)


def _generate_id() -> str:
    """Generate a new ULID for a record."""
    return str(ULID())


def _require_text(value: Any, message: str) -> str:
    """Return a stripped non-empty string or raise ValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _optional_page(value: Any, name: str) -> Optional[int]:
    """Validate an optional page number."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return value


def _check_chunk_index(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("Chunk index must be a non-negative integer")
    return value


# --- Row conversion ---


def _row_to_board(row: sqlite3.Row) -> Board:
    return Board(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_book(row: sqlite3.Row) -> Book:
    return Book(
        id=row["id"],
        board_id=row["board_id"],
        title=row["title"],
        grade=row["grade"],
        subject=row["subject"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_chapter(row: sqlite3.Row) -> Chapter:
    return Chapter(
        id=row["id"],
        book_id=row["book_id"],
        number=row["number"],
        title=row["title"],
    )


def _row_to_chunk(row: sqlite3.Row) -> ContentChunk:
    return ContentChunk(
        id=row["id"],
        book_id=row["book_id"],
        text=row["text"],
        chapter_id=row["chapter_id"],
        page_from=row["page_from"],
        page_to=row["page_to"],
        chunk_index=row["chunk_index"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# --- Insert helpers (caller owns the transaction) ---


def _insert_board(
    conn: sqlite3.Connection,
    name: str,
    description: Optional[str],
    is_active: bool,
) -> str:
    name = _require_text(name, "Board name is required")

    cursor = conn.execute("SELECT id FROM boards WHERE name_key = ?", (casefold(name),))
    if cursor.fetchone() is not None:
        raise ValidationError(f"Board '{name}' already exists")

    board_id = _generate_id()
    conn.execute(
        """
        INSERT INTO boards (id, name, name_key, description, is_active)
        VALUES (?, ?, ?, ?, ?)
        """,
        (board_id, name, casefold(name), description, int(is_active)),
    )
    return board_id


def _insert_book(
    conn: sqlite3.Connection,
    board_id: str,
    title: str,
    grade: str,
    subject: str,
    is_active: bool,
) -> str:
    title = _require_text(title, "Book title is required")
    grade = _require_text(grade, "Grade is required")
    subject = _require_text(subject, "Subject is required")

    cursor = conn.execute("SELECT id FROM boards WHERE id = ?", (board_id,))
    if cursor.fetchone() is None:
        raise ValidationError("Board not found")

    book_id = _generate_id()
    conn.execute(
        """
        INSERT INTO books (id, board_id, title, grade, subject, is_active)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (book_id, board_id, title, grade, subject, int(is_active)),
    )
    return book_id


def _insert_chapter(conn: sqlite3.Connection, book_id: str, number: int, title: str) -> str:
    title = _require_text(title, "Chapter title is required")
    if isinstance(number, bool) or not isinstance(number, int):
        raise ValidationError("Chapter number must be an integer")

    cursor = conn.execute("SELECT id FROM books WHERE id = ?", (book_id,))
    if cursor.fetchone() is None:
        raise ValidationError("Book not found")

    cursor = conn.execute(
        "SELECT id FROM chapters WHERE book_id = ? AND number = ?",
        (book_id, number),
    )
    if cursor.fetchone() is not None:
        raise ValidationError(f"Chapter {number} already exists in this book")

    chapter_id = _generate_id()
    conn.execute(
        "INSERT INTO chapters (id, book_id, number, title) VALUES (?, ?, ?, ?)",
        (chapter_id, book_id, number, title),
    )
    return chapter_id


def _check_chapter_in_book(conn: sqlite3.Connection, chapter_id: str, book_id: str) -> None:
    cursor = conn.execute(
        "SELECT id FROM chapters WHERE id = ? AND book_id = ?",
        (chapter_id, book_id),
    )
    if cursor.fetchone() is None:
        raise ValidationError("Chapter not found or does not belong to this book")


def _insert_chunk(
    conn: sqlite3.Connection,
    book_id: str,
    text: str,
    chapter_id: Optional[str],
    page_from: Optional[int],
    page_to: Optional[int],
    chunk_index: int,
) -> str:
    text = _require_text(text, "Chunk text is required")
    page_from = _optional_page(page_from, "Page from")
    page_to = _optional_page(page_to, "Page to")
    chunk_index = _check_chunk_index(chunk_index)

    if chapter_id:
        _check_chapter_in_book(conn, chapter_id, book_id)

    chunk_id = _generate_id()
    conn.execute(
        """
        INSERT INTO content_chunks
            (id, book_id, chapter_id, text, page_from, page_to, chunk_index)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (chunk_id, book_id, chapter_id or None, text, page_from, page_to, chunk_index),
    )
    return chunk_id


def _require_book(conn: sqlite3.Connection, book_id: str) -> None:
    cursor = conn.execute("SELECT id FROM books WHERE id = ?", (book_id,))
    if cursor.fetchone() is None:
        raise ValidationError("Book not found")


# --- Boards ---


def add_board(
    name: str,
    description: Optional[str] = None,
    is_active: bool = True,
    config: Optional[Config] = None,
) -> str:
    """Add a new board.

    Args:
        name: Board name, unique regardless of case.
        description: Optional description.
        is_active: Whether the board is visible to retrieval.
        config: Configuration to use.

    Returns:
        The generated board ID.

    Raises:
        ValidationError: If the name is blank or already taken.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        board_id = _insert_board(conn, name, description, is_active)
        conn.commit()

    return board_id


def get_board(board_id: str, config: Optional[Config] = None) -> Optional[Board]:
    """Get a board by ID."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("SELECT * FROM boards WHERE id = ?", (board_id,))
        row = cursor.fetchone()
        return _row_to_board(row) if row else None


def find_active_board_by_name(name: str, config: Optional[Config] = None) -> Optional[Board]:
    """Find an active board by name, ignoring case."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        row = find_active_board(conn, name)
        return _row_to_board(row) if row else None


def list_boards(active_only: bool = False, config: Optional[Config] = None) -> list[Board]:
    """List boards ordered by name."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        query = "SELECT * FROM boards"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY name_key"
        cursor = conn.execute(query)
        return [_row_to_board(row) for row in cursor.fetchall()]


def set_board_active(board_id: str, active: bool, config: Optional[Config] = None) -> bool:
    """Activate or deactivate a board.

    Returns:
        True if the board exists, False otherwise.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute(
            "UPDATE boards SET is_active = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (int(active), board_id),
        )
        conn.commit()
        return cursor.rowcount > 0


# --- Books ---


def add_book(
    board_id: str,
    title: str,
    grade: str,
    subject: str,
    is_active: bool = True,
    config: Optional[Config] = None,
) -> str:
    """Add a new book under a board.

    Returns:
        The generated book ID.

    Raises:
        ValidationError: If a field is blank or the board does not exist.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        book_id = _insert_book(conn, board_id, title, grade, subject, is_active)
        conn.commit()

    return book_id


def get_book(book_id: str, config: Optional[Config] = None) -> Optional[Book]:
    """Get a book by ID."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,))
        row = cursor.fetchone()
        return _row_to_book(row) if row else None


def list_books(
    board_id: Optional[str] = None,
    grade: Optional[str] = None,
    subject: Optional[str] = None,
    config: Optional[Config] = None,
) -> list[Book]:
    """List books, optionally filtered by board and case-insensitive grade/subject."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    conditions = []
    params: list = []
    if board_id:
        conditions.append("board_id = ?")
        params.append(board_id)
    if grade:
        conditions.append("casefold(grade) = ?")
        params.append(casefold(grade.strip()))
    if subject:
        conditions.append("casefold(subject) = ?")
        params.append(casefold(subject.strip()))

    query = "SELECT * FROM books"
    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += " ORDER BY grade, subject, title"

    with get_db(config) as conn:
        cursor = conn.execute(query, params)
        return [_row_to_book(row) for row in cursor.fetchall()]


def set_book_active(book_id: str, active: bool, config: Optional[Config] = None) -> bool:
    """Activate or deactivate a book.

    Returns:
        True if the book exists, False otherwise.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute(
            "UPDATE books SET is_active = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (int(active), book_id),
        )
        conn.commit()
        return cursor.rowcount > 0


# --- Chapters ---


def add_chapter(
    book_id: str,
    number: int,
    title: str,
    config: Optional[Config] = None,
) -> str:
    """Add a chapter to a book.

    Returns:
        The generated chapter ID.

    Raises:
        ValidationError: If the book does not exist or the number is taken.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        chapter_id = _insert_chapter(conn, book_id, number, title)
        conn.commit()

    return chapter_id


def list_chapters(book_id: str, config: Optional[Config] = None) -> list[Chapter]:
    """List a book's chapters in number order."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    rows = execute_query(
        "SELECT * FROM chapters WHERE book_id = ? ORDER BY number",
        (book_id,),
        config,
    )
    return [_row_to_chapter(row) for row in rows]


# --- Chunks ---


def add_chunk(
    book_id: str,
    text: str,
    chapter_id: Optional[str] = None,
    page_from: Optional[int] = None,
    page_to: Optional[int] = None,
    chunk_index: int = 0,
    config: Optional[Config] = None,
) -> str:
    """Add a single chunk to a book.

    Args:
        book_id: Owning book.
        text: Retrievable body (required).
        chapter_id: Optional chapter; must belong to ``book_id``.
        page_from: Optional first page.
        page_to: Optional last page.
        chunk_index: Ordering hint within the chapter/book.
        config: Configuration to use.

    Returns:
        The generated chunk ID.

    Raises:
        ValidationError: If the book or chapter is invalid, or a field is malformed.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        _require_book(conn, book_id)
        chunk_id = _insert_chunk(conn, book_id, text, chapter_id, page_from, page_to, chunk_index)
        conn.commit()

    return chunk_id


def add_chunks_bulk(
    book_id: str,
    chunks: Sequence[dict],
    config: Optional[Config] = None,
) -> list[str]:
    """Add several chunks to a book in one transaction.

    Each entry is a dict with ``text`` and optional ``chapter_id``,
    ``page_from``, ``page_to`` and ``chunk_index``. A missing
    ``chunk_index`` defaults to the entry's position in ``chunks``.

    Returns:
        The generated chunk IDs, in input order.

    Raises:
        ValidationError: If ``chunks`` is empty or any entry is invalid;
            nothing is written in that case.
    """
    if config is None:
        config = get_config()

    if not isinstance(chunks, (list, tuple)) or not chunks:
        raise ValidationError("Book ID and chunks array are required")

    ensure_initialized(config)

    with get_db(config) as conn:
        _require_book(conn, book_id)
        chunk_ids = []
        try:
            for index, chunk in enumerate(chunks):
                if not isinstance(chunk, dict):
                    raise ValidationError("Each chunk must have text content")
                chunk_ids.append(_insert_chunk(
                    conn,
                    book_id,
                    chunk.get("text"),
                    chunk.get("chapter_id"),
                    chunk.get("page_from"),
                    chunk.get("page_to"),
                    chunk.get("chunk_index", index),
                ))
        except ValidationError:
            conn.rollback()
            raise
        conn.commit()

    return chunk_ids


def get_chunk(
    chunk_id: str,
    include_parent: bool = True,
    config: Optional[Config] = None,
) -> Optional[ContentChunk]:
    """Get a chunk by ID.

    Args:
        chunk_id: The chunk ID.
        include_parent: Include book, board name and chapter.
        config: Configuration to use.

    Returns:
        The chunk if found, None otherwise.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("SELECT * FROM content_chunks WHERE id = ?", (chunk_id,))
        row = cursor.fetchone()
        if row is None:
            return None

        chunk = _row_to_chunk(row)

        if include_parent:
            cursor = conn.execute(
                """
                SELECT b.*, bd.name AS board_name
                FROM books b JOIN boards bd ON b.board_id = bd.id
                WHERE b.id = ?
                """,
                (chunk.book_id,),
            )
            parent = cursor.fetchone()
            if parent:
                chunk.book = _row_to_book(parent)
                chunk.board_name = parent["board_name"]

            if chunk.chapter_id:
                cursor = conn.execute(
                    "SELECT * FROM chapters WHERE id = ?",
                    (chunk.chapter_id,),
                )
                chapter_row = cursor.fetchone()
                if chapter_row:
                    chunk.chapter = _row_to_chapter(chapter_row)

        return chunk


def list_chunks_by_book(
    book_id: str,
    page: int = 1,
    per_page: int = 50,
    config: Optional[Config] = None,
) -> ChunkPage:
    """List a book's chunks, ordered by chapter number then chunk index.

    Chunks without a chapter come last.
    """
    if config is None:
        config = get_config()

    for value in (page, per_page):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError("Page and per_page must be positive integers")

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute(
            """
            SELECT cc.*, c.number AS chapter_number, c.title AS chapter_title
            FROM content_chunks cc
            LEFT JOIN chapters c ON cc.chapter_id = c.id
            WHERE cc.book_id = ?
            ORDER BY c.number IS NULL, c.number, cc.chunk_index, cc.id
            LIMIT ? OFFSET ?
            """,
            (book_id, per_page, (page - 1) * per_page),
        )
        chunks = []
        for row in cursor.fetchall():
            chunk = _row_to_chunk(row)
            if row["chapter_number"] is not None:
                chunk.chapter = Chapter(
                    id=row["chapter_id"],
                    book_id=book_id,
                    number=row["chapter_number"],
                    title=row["chapter_title"],
                )
            chunks.append(chunk)

        cursor = conn.execute(
            "SELECT COUNT(*) FROM content_chunks WHERE book_id = ?",
            (book_id,),
        )
        total = cursor.fetchone()[0]

    return ChunkPage(chunks=chunks, page=page, per_page=per_page, total=total)


def update_chunk(
    chunk_id: str,
    text: Optional[str] = None,
    chapter_id: Optional[str] = None,
    clear_chapter: bool = False,
    page_from: Optional[int] = None,
    page_to: Optional[int] = None,
    chunk_index: Optional[int] = None,
    config: Optional[Config] = None,
) -> bool:
    """Update an existing chunk.

    Args:
        chunk_id: The chunk ID to update.
        text: New text (optional).
        chapter_id: New chapter; must belong to the chunk's book.
        clear_chapter: Detach the chunk from its chapter.
        page_from: New first page.
        page_to: New last page.
        chunk_index: New ordering hint.
        config: Configuration to use.

    Returns:
        True if chunk was updated, False if not found.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("SELECT book_id FROM content_chunks WHERE id = ?", (chunk_id,))
        row = cursor.fetchone()
        if row is None:
            return False

        updates = []
        params: list = []

        if text is not None:
            updates.append("text = ?")
            params.append(_require_text(text, "Chunk text cannot be empty"))
        if clear_chapter:
            updates.append("chapter_id = NULL")
        elif chapter_id is not None:
            _check_chapter_in_book(conn, chapter_id, row["book_id"])
            updates.append("chapter_id = ?")
            params.append(chapter_id)
        if page_from is not None:
            updates.append("page_from = ?")
            params.append(_optional_page(page_from, "Page from"))
        if page_to is not None:
            updates.append("page_to = ?")
            params.append(_optional_page(page_to, "Page to"))
        if chunk_index is not None:
            updates.append("chunk_index = ?")
            params.append(_check_chunk_index(chunk_index))

        if updates:
            updates.append("updated_at = CURRENT_TIMESTAMP")
            query = f"UPDATE content_chunks SET {', '.join(updates)} WHERE id = ?"
            params.append(chunk_id)
            conn.execute(query, params)
            conn.commit()

    return True


def delete_chunk(chunk_id: str, config: Optional[Config] = None) -> bool:
    """Delete a chunk by ID.

    Returns:
        True if the chunk was deleted, False if not found.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("DELETE FROM content_chunks WHERE id = ?", (chunk_id,))
        conn.commit()
        return cursor.rowcount > 0


def delete_chunks_by_book(book_id: str, config: Optional[Config] = None) -> int:
    """Delete every chunk of a book.

    Returns:
        Number of chunks deleted.
    """
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        cursor = conn.execute("DELETE FROM content_chunks WHERE book_id = ?", (book_id,))
        conn.commit()
        return cursor.rowcount


# --- Statistics ---


def get_content_stats(config: Optional[Config] = None) -> ContentStats:
    """Count active boards and books, chapters and chunks."""
    if config is None:
        config = get_config()

    ensure_initialized(config)

    with get_db(config) as conn:
        total_boards = conn.execute("SELECT COUNT(*) FROM boards WHERE is_active = 1").fetchone()[0]
        total_books = conn.execute("SELECT COUNT(*) FROM books WHERE is_active = 1").fetchone()[0]
        total_chapters = conn.execute("SELECT COUNT(*) FROM chapters").fetchone()[0]
        total_chunks = conn.execute("SELECT COUNT(*) FROM content_chunks").fetchone()[0]

        cursor = conn.execute(
            """
            SELECT bd.id, bd.name, COUNT(b.id) AS book_count
            FROM boards bd
            LEFT JOIN books b ON b.board_id = bd.id
            WHERE bd.is_active = 1
            GROUP BY bd.id
            ORDER BY bd.name_key
            """
        )
        books_by_board = [
            BoardBookCount(id=row["id"], name=row["name"], book_count=row["book_count"])
            for row in cursor.fetchall()
        ]

    return ContentStats(
        total_boards=total_boards,
        total_books=total_books,
        total_chapters=total_chapters,
        total_chunks=total_chunks,
        books_by_board=books_by_board,
    )


# --- Import ---


def _mappings(entries: Any, what: str) -> list[dict]:
    """Check that a nested corpus list holds only mappings."""
    if entries is None:
        return []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ValidationError(f"Each {what} entry must be a mapping")
    return entries


def import_corpus(path: Path, config: Optional[Config] = None) -> dict[str, int]:
    """Load boards, books, chapters and chunks from a YAML or JSON file.

    The file holds a top-level ``boards`` list; each board may nest
    ``books``, each book ``chapters`` and ``chunks``, and each chapter its
    own ``chunks``. Boards that already exist (by name, ignoring case) are
    reused. The whole file is imported in one transaction.

    Returns:
        Counts of created records keyed by ``boards``, ``books``,
        ``chapters`` and ``chunks``.

    Raises:
        ValidationError: If the file is malformed; nothing is written.
    """
    if config is None:
        config = get_config()

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Could not parse corpus file: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("boards"), list):
        raise ValidationError("Corpus file must contain a 'boards' list")

    ensure_initialized(config)

    counts = {"boards": 0, "books": 0, "chapters": 0, "chunks": 0}

    with get_db(config) as conn:
        try:
            for board_data in _mappings(data["boards"], "board"):
                existing = conn.execute(
                    "SELECT id FROM boards WHERE name_key = ?",
                    (casefold(str(board_data.get("name") or "").strip()),),
                ).fetchone()
                if existing:
                    board_id = existing["id"]
                else:
                    board_id = _insert_board(
                        conn,
                        board_data.get("name"),
                        board_data.get("description"),
                        board_data.get("active", True),
                    )
                    counts["boards"] += 1

                for book_data in _mappings(board_data.get("books"), "book"):
                    # Grades are often written as bare numbers in YAML; an
                    # empty value loads as None and must stay missing
                    grade = book_data.get("grade")
                    book_id = _insert_book(
                        conn,
                        board_id,
                        book_data.get("title"),
                        str(grade) if grade is not None else None,
                        book_data.get("subject"),
                        book_data.get("active", True),
                    )
                    counts["books"] += 1

                    position = 0
                    for chapter_data in _mappings(book_data.get("chapters"), "chapter"):
                        chapter_id = _insert_chapter(
                            conn, book_id, chapter_data.get("number"), chapter_data.get("title"),
                        )
                        counts["chapters"] += 1
                        for chunk_data in _mappings(chapter_data.get("chunks"), "chunk"):
                            _insert_chunk(
                                conn, book_id, chunk_data.get("text"), chapter_id,
                                chunk_data.get("page_from"), chunk_data.get("page_to"),
                                chunk_data.get("chunk_index", position),
                            )
                            position += 1
                            counts["chunks"] += 1

                    for chunk_data in _mappings(book_data.get("chunks"), "chunk"):
                        _insert_chunk(
                            conn, book_id, chunk_data.get("text"), None,
                            chunk_data.get("page_from"), chunk_data.get("page_to"),
                            chunk_data.get("chunk_index", position),
                        )
                        position += 1
                        counts["chunks"] += 1
        except ValidationError:
            conn.rollback()
            raise
        conn.commit()

    logger.info("Imported corpus from %s: %s", path, counts)
    return counts


# --- Retrieval ---


def retrieve_content(
    board: str,
    grade: str,
    subject: str,
    seed_keywords: Sequence[str],
    chapter_id: Optional[str] = None,
    limit: Optional[int] = None,
    strategies: Optional[Sequence[SearchStrategy]] = None,
    config: Optional[Config] = None,
) -> RetrievalResponse:
    """Retrieve the most relevant chunks for a scoped keyword query.

    Full-text search runs first; the substring fallback runs only if it
    finds nothing. An empty response is a success, not an error.

    Args:
        board: Board name (case-insensitive).
        grade: Book grade (case-insensitive).
        subject: Book subject (case-insensitive).
        seed_keywords: Keywords, combined with OR.
        chapter_id: Optional chapter to restrict to.
        limit: Maximum chunks to return (default from config).
        strategies: Search strategies to try in order (default full-text
            then fallback).
        config: Configuration to use.

    Returns:
        A RetrievalResponse; ``search_type`` names the path that served it.

    Raises:
        ValidationError: If a required field is missing or malformed.
        NotFoundError: If the board does not name an active board.
        StoreFailureError: If the database cannot be queried.
    """
    if config is None:
        config = get_config()

    # Validate everything before touching the store
    board = _require_text(board, SCOPE_REQUIRED_MESSAGE)
    grade = _require_text(grade, SCOPE_REQUIRED_MESSAGE)
    subject = _require_text(subject, SCOPE_REQUIRED_MESSAGE)
    keywords = normalize_keywords(seed_keywords)
    limit = normalize_limit(limit, config.search)

    if chapter_id is not None and not isinstance(chapter_id, str):
        raise ValidationError("Chapter ID must be a string")
    chapter_id = chapter_id.strip() if chapter_id else None

    if strategies is None:
        strategies = DEFAULT_STRATEGIES

    try:
        ensure_initialized(config)
        with get_db(config) as conn:
            # One read transaction so both phases see the same snapshot
            conn.execute("BEGIN")
            try:
                scope = resolve_scope(conn, board, grade, subject, chapter_id)
                response = run_strategies(conn, scope, keywords, limit, strategies)
            finally:
                conn.rollback()
    except (sqlite3.Error, OSError) as e:
        # OSError covers a database directory that cannot be created
        logger.error("Corpus store query failed: %s", e)
        raise StoreFailureError(f"Failed to retrieve content: {e}") from e

    return response
