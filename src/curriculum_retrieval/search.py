"""Search functionality for curriculum-retrieval.

Retrieval runs an ordered list of strategies against one scope and keeps the
first non-empty result:

1. ``fulltext``: FTS5 match of any keyword, ranked by bm25.
2. ``fallback``: case-insensitive substring match of any keyword, unranked.

Every caller-supplied value reaches SQLite as a bound parameter.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from .config import SearchConfig
from .db import casefold
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


SEARCH_TYPE_FULLTEXT = "fulltext"
SEARCH_TYPE_FALLBACK = "fallback"

NO_RESULTS_MESSAGE = "No relevant content found for the given criteria"

# Letters and digits only; unicode61 treats "_" like any other separator
_TOKEN_RE = re.compile(r"[^\W_]+")

# Shared SELECT list and joins for both search paths
_CHUNK_COLUMNS = """
    cc.id,
    cc.text,
    cc.page_from,
    cc.page_to,
    cc.chapter_id,
    cc.book_id,
    c.number AS chapter_number,
    c.title AS chapter_title,
    b.title AS book_title,
    b.grade,
    b.subject,
    bd.name AS board_name
"""

_CHUNK_JOINS = """
    JOIN books b ON cc.book_id = b.id
    JOIN boards bd ON b.board_id = bd.id
    LEFT JOIN chapters c ON cc.chapter_id = c.id
"""


@dataclass(frozen=True)
class Scope:
    """Resolved filter applied to every search path."""
    board_id: str
    board_name: str
    grade: str
    subject: str
    chapter_id: Optional[str] = None

    @property
    def grade_key(self) -> str:
        return casefold(self.grade)

    @property
    def subject_key(self) -> str:
        return casefold(self.subject)


@dataclass
class ChapterRef:
    """Chapter summary attached to a match."""
    id: str
    number: int
    title: str


@dataclass
class BookRef:
    """Book summary attached to a match."""
    id: str
    title: str
    grade: str
    subject: str


@dataclass
class ChunkMatch:
    """A chunk returned by one of the search paths."""
    id: str
    text: str
    book: BookRef
    board_name: str
    page_from: Optional[int] = None
    page_to: Optional[int] = None
    chapter: Optional[ChapterRef] = None
    relevance_score: Optional[float] = None  # Only set by the full-text path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the response record shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "pageFrom": self.page_from,
            "pageTo": self.page_to,
            "chapter": None,
            "book": {
                "id": self.book.id,
                "title": self.book.title,
                "grade": self.book.grade,
                "subject": self.book.subject,
            },
            "board": {"name": self.board_name},
        }
        if self.chapter is not None:
            data["chapter"] = {
                "id": self.chapter.id,
                "number": self.chapter.number,
                "title": self.chapter.title,
            }
        if self.relevance_score is not None:
            data["relevanceScore"] = self.relevance_score
        return data


@dataclass
class RetrievalResponse:
    """Outcome of a retrieval request.

    ``search_type`` names the strategy that produced ``chunks``; it is None
    when every strategy came back empty.
    """
    chunks: list[ChunkMatch] = field(default_factory=list)
    search_type: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return None if self.chunks else NO_RESULTS_MESSAGE

    def to_dict(self) -> dict[str, Any]:
        if not self.chunks:
            return {"chunks": [], "message": NO_RESULTS_MESSAGE}
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "searchType": self.search_type,
        }


SearchFunction = Callable[[sqlite3.Connection, Scope, Sequence[str], int], list[ChunkMatch]]


@dataclass(frozen=True)
class SearchStrategy:
    """A named search path."""
    name: str
    search: SearchFunction


# --- Request normalization ---


def normalize_keywords(raw: Any) -> list[str]:
    """Trim seed keywords and drop blank entries.

    Order is preserved and duplicates are kept.

    Raises:
        ValidationError: If ``raw`` is missing, not a list, holds a
            non-string entry, or is empty after trimming.
    """
    if raw is None or not isinstance(raw, (list, tuple)):
        raise ValidationError("Seed keywords array is required")

    keywords = []
    for entry in raw:
        if not isinstance(entry, str):
            raise ValidationError("Seed keywords must be strings")
        entry = entry.strip()
        if entry:
            keywords.append(entry)

    if not keywords:
        raise ValidationError("Seed keywords array is required")
    return keywords


def normalize_limit(limit: Any, search_config: SearchConfig) -> int:
    """Apply the default limit and check bounds."""
    if limit is None:
        return search_config.default_limit
    # bool is an int subclass; True is not a limit
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError("Limit must be an integer")
    if not (1 <= limit <= search_config.max_limit):
        raise ValidationError(f"Limit must be between 1 and {search_config.max_limit}")
    return limit


# --- Scope resolution ---


def find_active_board(conn: sqlite3.Connection, name: str) -> Optional[sqlite3.Row]:
    """Look up an active board by case-insensitive name."""
    cursor = conn.execute(
        "SELECT * FROM boards WHERE name_key = ? AND is_active = 1",
        (casefold(name),),
    )
    return cursor.fetchone()


def resolve_scope(
    conn: sqlite3.Connection,
    board: str,
    grade: str,
    subject: str,
    chapter_id: Optional[str] = None,
) -> Scope:
    """Resolve a board name and filters into a Scope.

    Grade and subject are not checked here; an unknown grade or subject
    simply matches nothing later.

    Raises:
        NotFoundError: If no active board has this name.
    """
    row = find_active_board(conn, board)
    if row is None:
        raise NotFoundError(f"Board '{board}' not found")

    return Scope(
        board_id=row["id"],
        board_name=row["name"],
        grade=grade,
        subject=subject,
        chapter_id=chapter_id or None,
    )


def _build_scope_clauses(scope: Scope) -> tuple[list[str], list]:
    """Build SQL WHERE clauses restricting chunks to a scope.

    Returns:
        Tuple of (list of SQL clause strings, list of parameters).
        Clauses do NOT include "WHERE" or "AND" prefix.
    """
    clauses = [
        "bd.id = ?",
        "bd.is_active = 1",
        "casefold(b.grade) = ?",
        "casefold(b.subject) = ?",
        "b.is_active = 1",
    ]
    params: list = [scope.board_id, scope.grade_key, scope.subject_key]

    if scope.chapter_id:
        clauses.append("cc.chapter_id = ?")
        params.append(scope.chapter_id)

    return clauses, params


def _row_to_match(row: sqlite3.Row, scored: bool) -> ChunkMatch:
    """Convert a joined chunk row into a ChunkMatch."""
    chapter = None
    if row["chapter_id"] and row["chapter_number"] is not None:
        chapter = ChapterRef(
            id=row["chapter_id"],
            number=row["chapter_number"],
            title=row["chapter_title"],
        )

    return ChunkMatch(
        id=row["id"],
        text=row["text"],
        page_from=row["page_from"],
        page_to=row["page_to"],
        chapter=chapter,
        book=BookRef(
            id=row["book_id"],
            title=row["book_title"],
            grade=row["grade"],
            subject=row["subject"],
        ),
        board_name=row["board_name"],
        relevance_score=float(row["relevance_score"]) if scored else None,
    )


# --- Full-text path ---


def build_match_expression(keywords: Sequence[str]) -> str:
    """Build a disjunctive FTS5 query from keywords.

    Each keyword becomes a quoted phrase of its word tokens, so quotes,
    operators and column filters in the input never reach the FTS5 parser.
    Keywords without word characters are skipped.

    Example:
        ["fraction", "Place Value"] -> '"fraction" OR "Place Value"'
    """
    phrases = []
    for keyword in keywords:
        # Tokens keep their case; FTS5 folds query and index the same way
        tokens = _TOKEN_RE.findall(keyword)
        if tokens:
            phrases.append('"' + " ".join(tokens) + '"')
    return " OR ".join(phrases)


def fulltext_search(
    conn: sqlite3.Connection,
    scope: Scope,
    keywords: Sequence[str],
    limit: int,
) -> list[ChunkMatch]:
    """Rank in-scope chunks matching any keyword by bm25 relevance.

    Scores are negated bm25 values, so higher means more relevant. Ties are
    ordered by chunk ID.
    """
    expression = build_match_expression(keywords)
    if not expression:
        logger.debug("No indexable tokens in keywords %r; skipping full-text search", list(keywords))
        return []

    clauses, params = _build_scope_clauses(scope)
    query = f"""
        SELECT {_CHUNK_COLUMNS},
            -bm25(content_chunks_fts) AS relevance_score
        FROM content_chunks_fts
        JOIN content_chunks cc ON cc.seq = content_chunks_fts.rowid
        {_CHUNK_JOINS}
        WHERE content_chunks_fts MATCH ?
          AND {" AND ".join(clauses)}
        ORDER BY relevance_score DESC, cc.id ASC
        LIMIT ?
    """
    cursor = conn.execute(query, [expression, *params, limit])
    return [_row_to_match(row, scored=True) for row in cursor.fetchall()]


# --- Fallback path ---


def fallback_search(
    conn: sqlite3.Connection,
    scope: Scope,
    keywords: Sequence[str],
    limit: int,
) -> list[ChunkMatch]:
    """Find in-scope chunks containing any keyword as a substring.

    Matching is case-insensitive (casefolded on both sides) and unranked;
    results come back in chunk ID order.
    """
    if not keywords:
        return []

    clauses, params = _build_scope_clauses(scope)
    # One bound placeholder per keyword; keyword text is never part of the SQL
    keyword_clause = " OR ".join("instr(casefold(cc.text), ?) > 0" for _ in keywords)
    query = f"""
        SELECT {_CHUNK_COLUMNS}
        FROM content_chunks cc
        {_CHUNK_JOINS}
        WHERE {" AND ".join(clauses)}
          AND ({keyword_clause})
        ORDER BY cc.id ASC
        LIMIT ?
    """
    cursor = conn.execute(query, [*params, *(casefold(k) for k in keywords), limit])
    return [_row_to_match(row, scored=False) for row in cursor.fetchall()]


DEFAULT_STRATEGIES: tuple[SearchStrategy, ...] = (
    SearchStrategy(SEARCH_TYPE_FULLTEXT, fulltext_search),
    SearchStrategy(SEARCH_TYPE_FALLBACK, fallback_search),
)


# --- Assembly ---


def assemble_response(search_type: Optional[str], matches: list[ChunkMatch]) -> RetrievalResponse:
    """Wrap matches from one search path into a response."""
    if not matches:
        return RetrievalResponse()
    return RetrievalResponse(chunks=list(matches), search_type=search_type)


def run_strategies(
    conn: sqlite3.Connection,
    scope: Scope,
    keywords: Sequence[str],
    limit: int,
    strategies: Sequence[SearchStrategy] = DEFAULT_STRATEGIES,
) -> RetrievalResponse:
    """Try each strategy in order and return the first non-empty result.

    A strategy runs only after the previous one has returned empty.
    """
    for position, strategy in enumerate(strategies):
        matches = strategy.search(conn, scope, keywords, limit)
        logger.debug("Strategy %s returned %d matches", strategy.name, len(matches))
        if matches:
            if position > 0:
                logger.info(
                    "Retrieval for board=%s grade=%s subject=%s served by %s search",
                    scope.board_name, scope.grade, scope.subject, strategy.name,
                )
            return assemble_response(strategy.name, matches[:limit])

    logger.info(
        "No content found for board=%s grade=%s subject=%s keywords=%r",
        scope.board_name, scope.grade, scope.subject, list(keywords),
    )
    return assemble_response(None, [])
