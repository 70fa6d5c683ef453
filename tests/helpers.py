"""Test helper utilities.

This module provides helper functions for writing tests, including:
- Assertion helpers for validating retrieval responses
- Factory helpers for creating test data
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from curriculum_retrieval.config import Config


# -----------------------------------------------------------------------------
# Assertion Helpers
# -----------------------------------------------------------------------------


def assert_in_scope(
    response: Any,
    board_name: str,
    grade: str,
    subject: str,
    chapter_id: str | None = None,
) -> None:
    """Assert that every chunk of a response lies in the given scope.

    Comparisons are case-insensitive, as retrieval's own are.

    Args:
        response: RetrievalResponse from core.retrieve_content
        board_name: Expected board name
        grade: Expected grade
        subject: Expected subject
        chapter_id: Expected chapter, if the request named one

    Raises:
        AssertionError: If any chunk falls outside the scope
    """
    for match in response.chunks:
        assert match.board_name.casefold() == board_name.casefold(), (
            f"Chunk {match.id} from board {match.board_name}, expected {board_name}"
        )
        assert match.book.grade.casefold() == grade.casefold(), (
            f"Chunk {match.id} from grade {match.book.grade}, expected {grade}"
        )
        assert match.book.subject.casefold() == subject.casefold(), (
            f"Chunk {match.id} from subject {match.book.subject}, expected {subject}"
        )
        if chapter_id is not None:
            assert match.chapter is not None and match.chapter.id == chapter_id, (
                f"Chunk {match.id} outside chapter {chapter_id}"
            )


def assert_scores_non_increasing(response: Any) -> None:
    """Assert that full-text results carry scores in non-increasing order."""
    scores = [match.relevance_score for match in response.chunks]
    assert all(score is not None for score in scores), f"Missing scores: {scores}"
    assert scores == sorted(scores, reverse=True), f"Scores not ordered: {scores}"


def result_ids(response: Any) -> list[str]:
    """Chunk IDs of a response, in order."""
    return [match.id for match in response.chunks]


# -----------------------------------------------------------------------------
# Factory Helpers
# -----------------------------------------------------------------------------


def make_book(
    config: "Config",
    board: str = "Test Board",
    grade: str = "5",
    subject: str = "Math",
    title: str = "Test Book",
) -> str:
    """Create a board (if needed) and a book with sensible defaults.

    Returns:
        The book ID
    """
    from curriculum_retrieval import core

    existing = core.find_active_board_by_name(board, config=config)
    board_id = existing.id if existing else core.add_board(board, config=config)
    return core.add_book(board_id, title, grade, subject, config=config)


def make_chunks(config: "Config", book_id: str, texts: list[str]) -> list[str]:
    """Add one chunk per text to a book.

    Returns:
        The chunk IDs, in order
    """
    from curriculum_retrieval import core

    return core.add_chunks_bulk(book_id, [{"text": t} for t in texts], config=config)
