"""Database tests: schema setup, connection settings and the full-text index.

Migration tests are deferred until v1.0.0; the placeholder below fails once
the version reaches 1.0.0 as a reminder to write them.
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError, version as get_version
from pathlib import Path

import pytest
from packaging.version import Version

from curriculum_retrieval.db import casefold, get_db, get_schema_version, init_db
from curriculum_retrieval.schema import SCHEMA_VERSION


def _current_version() -> Version:
    try:
        return Version(get_version("curriculum-retrieval"))
    except PackageNotFoundError:
        # Not installed; read pyproject.toml
        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        match = re.search(r'^version\s*=\s*"([^"]+)"', pyproject.read_text(), re.MULTILINE)
        if not match:
            pytest.skip("Could not determine package version")
        return Version(match.group(1))


class TestMigrations:
    """Placeholder for database migration tests."""

    def test_migration_tests_needed_after_v1(self):
        current = _current_version()
        if current >= Version("1.0.0"):
            pytest.fail(
                f"Version {current} >= 1.0.0 detected. "
                "Implement database migration tests and remove this placeholder."
            )


class TestInitDb:
    """Test schema creation."""

    def test_creates_tables(self, temp_config):
        with get_db(temp_config) as conn:
            names = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'trigger')")
            }
        assert {"boards", "books", "chapters", "content_chunks", "content_chunks_fts"} <= names
        assert {"content_chunks_ai", "content_chunks_ad", "content_chunks_au"} <= names

    def test_schema_version_recorded(self, temp_config):
        assert get_schema_version(temp_config) == SCHEMA_VERSION

    def test_idempotent(self, temp_config):
        init_db(temp_config)
        init_db(temp_config)
        with get_db(temp_config) as conn:
            rows = conn.execute("SELECT COUNT(*) FROM meta WHERE key = 'schema_version'").fetchone()
        assert rows[0] == 1

    def test_no_version_before_init(self, temp_dir):
        from curriculum_retrieval.config import Config

        assert get_schema_version(Config(db_path=temp_dir / "absent.db")) is None

    def test_creates_parent_directory(self, temp_dir):
        from curriculum_retrieval.config import Config

        config = Config(db_path=temp_dir / "a" / "b" / "corpus.db")
        init_db(config)
        assert config.db_path.exists()


class TestConnection:
    """Test per-connection settings."""

    def test_pragmas(self, temp_config):
        with get_db(temp_config) as conn:
            assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_casefold_function(self, temp_config):
        with get_db(temp_config) as conn:
            assert conn.execute("SELECT casefold('Straße')").fetchone()[0] == "strasse"
            assert conn.execute("SELECT casefold(NULL)").fetchone()[0] is None

    def test_casefold_python(self):
        assert casefold("MATH") == "math"
        assert casefold(None) is None


class TestFulltextTriggers:
    """The external-content FTS index follows content_chunks through the triggers."""

    def _matching_ids(self, conn, term):
        return {
            row["id"]
            for row in conn.execute(
                """
                SELECT cc.id FROM content_chunks_fts
                JOIN content_chunks cc ON cc.seq = content_chunks_fts.rowid
                WHERE content_chunks_fts MATCH ?
                """,
                (term,),
            )
        }

    def _integrity_check(self, conn):
        # Raises sqlite3.DatabaseError if the index and content table disagree
        conn.execute("INSERT INTO content_chunks_fts (content_chunks_fts) VALUES ('integrity-check')")

    def test_indexed_on_insert(self, sample_corpus, temp_config):
        with get_db(temp_config) as conn:
            self._integrity_check(conn)
            assert self._matching_ids(conn, "numerator") == {sample_corpus["fraction_intro"]}

    def test_cascade_delete_removes_entries(self, sample_corpus, temp_config):
        with get_db(temp_config) as conn:
            conn.execute("DELETE FROM books WHERE id = ?", (sample_corpus["math5"],))
            conn.commit()

            self._integrity_check(conn)
            assert self._matching_ids(conn, "numerator") == set()
            assert sample_corpus["science_chunk"] in self._matching_ids(conn, "sunlight")

    def test_text_update_reindexes(self, sample_corpus, temp_config):
        with get_db(temp_config) as conn:
            conn.execute(
                "UPDATE content_chunks SET text = ? WHERE id = ?",
                ("Pizza slices show thirds and sixths.", sample_corpus["pizza"]),
            )
            conn.commit()

            self._integrity_check(conn)
            assert self._matching_ids(conn, "picnic") == set()
            assert self._matching_ids(conn, "sixths") == {sample_corpus["pizza"]}

    def test_non_text_update_keeps_entry(self, sample_corpus, temp_config):
        with get_db(temp_config) as conn:
            conn.execute(
                "UPDATE content_chunks SET page_from = 9 WHERE id = ?", (sample_corpus["pizza"],)
            )
            conn.commit()

            self._integrity_check(conn)
            assert self._matching_ids(conn, "picnic") == {sample_corpus["pizza"]}
