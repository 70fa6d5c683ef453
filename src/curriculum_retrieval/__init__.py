"""Curriculum Retrieval - scoped keyword retrieval over curriculum book chunks."""

from importlib.metadata import version, PackageNotFoundError

_pkg = __package__.split('.')[0].replace("_", "-")

try:
    __version__: str = version(_pkg)
except PackageNotFoundError:
    __version__: str = "0.0.1-dev"  # fallback for running directly from source

from .core import (
    # Retrieval
    retrieve_content,
    # Boards and books
    add_board,
    get_board,
    find_active_board_by_name,
    list_boards,
    set_board_active,
    add_book,
    get_book,
    list_books,
    set_book_active,
    add_chapter,
    list_chapters,
    # Chunks
    add_chunk,
    add_chunks_bulk,
    get_chunk,
    list_chunks_by_book,
    update_chunk,
    delete_chunk,
    delete_chunks_by_book,
    # Corpus
    get_content_stats,
    import_corpus,
    # Dataclasses
    Board,
    Book,
    Chapter,
    ContentChunk,
    ChunkPage,
    ContentStats,
)
from .errors import NotFoundError, RetrievalError, StoreFailureError, ValidationError
from .search import ChunkMatch, RetrievalResponse, SearchStrategy

__all__ = [
    # Retrieval
    "retrieve_content",
    # Boards and books
    "add_board",
    "get_board",
    "find_active_board_by_name",
    "list_boards",
    "set_board_active",
    "add_book",
    "get_book",
    "list_books",
    "set_book_active",
    "add_chapter",
    "list_chapters",
    # Chunks
    "add_chunk",
    "add_chunks_bulk",
    "get_chunk",
    "list_chunks_by_book",
    "update_chunk",
    "delete_chunk",
    "delete_chunks_by_book",
    # Corpus
    "get_content_stats",
    "import_corpus",
    # Dataclasses
    "Board",
    "Book",
    "Chapter",
    "ContentChunk",
    "ChunkPage",
    "ContentStats",
    "ChunkMatch",
    "RetrievalResponse",
    "SearchStrategy",
    # Errors
    "RetrievalError",
    "ValidationError",
    "NotFoundError",
    "StoreFailureError",
]
