"""Database schema definitions for curriculum-retrieval."""

SCHEMA_VERSION = 2

# Schema creation SQL
SCHEMA_SQL = """
-- Metadata table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Curriculum boards (CBSE, ICSE, ...)
CREATE TABLE IF NOT EXISTS boards (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    name_key TEXT NOT NULL UNIQUE,          -- casefolded name, lookup key
    description TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Books (one grade and subject each)
CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    board_id TEXT NOT NULL REFERENCES boards(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    grade TEXT NOT NULL,
    subject TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Chapters (optional grouping for chunks)
CREATE TABLE IF NOT EXISTS chapters (
    id TEXT PRIMARY KEY,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    number INTEGER NOT NULL,
    title TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (book_id, number)
);

-- Retrievable text chunks
CREATE TABLE IF NOT EXISTS content_chunks (
    seq INTEGER PRIMARY KEY,                -- rowid alias, full-text index key
    id TEXT NOT NULL UNIQUE,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    chapter_id TEXT REFERENCES chapters(id) ON DELETE SET NULL,
    text TEXT NOT NULL,
    page_from INTEGER,
    page_to INTEGER,
    chunk_index INTEGER NOT NULL DEFAULT 0,  -- Ordering hint within chapter/book
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Full-text index over chunk text (external content, keyed by seq)
CREATE VIRTUAL TABLE IF NOT EXISTS content_chunks_fts USING fts5(
    text,
    content = 'content_chunks',
    content_rowid = 'seq',
    tokenize = 'unicode61 remove_diacritics 2'
);

CREATE TRIGGER IF NOT EXISTS content_chunks_ai AFTER INSERT ON content_chunks BEGIN
    INSERT INTO content_chunks_fts (rowid, text) VALUES (new.seq, new.text);
END;

CREATE TRIGGER IF NOT EXISTS content_chunks_ad AFTER DELETE ON content_chunks BEGIN
    INSERT INTO content_chunks_fts (content_chunks_fts, rowid, text) VALUES ('delete', old.seq, old.text);
END;

CREATE TRIGGER IF NOT EXISTS content_chunks_au AFTER UPDATE OF text ON content_chunks BEGIN
    INSERT INTO content_chunks_fts (content_chunks_fts, rowid, text) VALUES ('delete', old.seq, old.text);
    INSERT INTO content_chunks_fts (rowid, text) VALUES (new.seq, new.text);
END;

-- Indexes for the scope predicate and listings
CREATE INDEX IF NOT EXISTS idx_books_board ON books(board_id);
CREATE INDEX IF NOT EXISTS idx_books_scope ON books(board_id, grade, subject);
CREATE INDEX IF NOT EXISTS idx_chapters_book ON chapters(book_id);
CREATE INDEX IF NOT EXISTS idx_chunks_book ON content_chunks(book_id);
CREATE INDEX IF NOT EXISTS idx_chunks_chapter ON content_chunks(chapter_id);
CREATE INDEX IF NOT EXISTS idx_chunks_book_chapter ON content_chunks(book_id, chapter_id);
"""
