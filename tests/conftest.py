"""Centralized pytest fixtures and configuration.

This module provides shared fixtures for all tests, including:
- Database configuration with isolated temp directories
- A pre-populated sample corpus for retrieval tests
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from curriculum_retrieval.config import Config, SearchConfig
from curriculum_retrieval.db import init_db

if TYPE_CHECKING:
    from collections.abc import Generator


# -----------------------------------------------------------------------------
# Database Configuration Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Config, None, None]:
    """Create a temporary configuration with an initialized database.

    This is the standard fixture for tests that need database access.
    """
    config = Config(
        db_path=temp_dir / "test.db",
        search=SearchConfig(),
    )
    init_db(config)
    yield config


@pytest.fixture
def cli_config(temp_config: Config, monkeypatch) -> Config:
    """Point the CLI (which uses the global config) at the temp database."""
    monkeypatch.setattr("curriculum_retrieval.core.get_config", lambda: temp_config)
    return temp_config


# -----------------------------------------------------------------------------
# Pre-populated Database Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_corpus(temp_config: Config) -> dict[str, str]:
    """Create a small multi-board corpus and return its IDs.

    Layout:
    - CBSE (active)
      - Math Magic 5 (grade 5, Math): chapters 1 Fractions, 2 Decimals
      - Science Explorer 5 (grade 5, Science)
      - Math Magic 6 (grade 6, Math)
      - Old Math 5 (grade 5, Math, inactive)
    - ICSE (active): ICSE Maths 5 (grade 5, Math)
    - Retired Board (inactive): Retired Math 5 (grade 5, Math)

    Every book outside CBSE / 5 / Math also mentions "fraction", so any
    scope leak shows up in fraction searches.

    Returns a dict mapping descriptive names to IDs.
    """
    from curriculum_retrieval import core

    ids: dict[str, str] = {}

    ids["cbse"] = core.add_board("CBSE", description="Central Board", config=temp_config)
    ids["icse"] = core.add_board("ICSE", config=temp_config)
    ids["retired"] = core.add_board("Retired Board", is_active=False, config=temp_config)

    ids["math5"] = core.add_book(ids["cbse"], "Math Magic 5", "5", "Math", config=temp_config)
    ids["science5"] = core.add_book(ids["cbse"], "Science Explorer 5", "5", "Science", config=temp_config)
    ids["math6"] = core.add_book(ids["cbse"], "Math Magic 6", "6", "Math", config=temp_config)
    ids["old_math5"] = core.add_book(
        ids["cbse"], "Old Math 5", "5", "Math", is_active=False, config=temp_config,
    )
    ids["icse_math5"] = core.add_book(ids["icse"], "ICSE Maths 5", "5", "Math", config=temp_config)
    ids["retired_math5"] = core.add_book(ids["retired"], "Retired Math 5", "5", "Math", config=temp_config)

    ids["ch_fractions"] = core.add_chapter(ids["math5"], 1, "Fractions", config=temp_config)
    ids["ch_decimals"] = core.add_chapter(ids["math5"], 2, "Decimals", config=temp_config)

    ids["fraction_intro"] = core.add_chunk(
        ids["math5"],
        "A fraction names part of a whole. In the fraction 3/4 the numerator is 3.",
        chapter_id=ids["ch_fractions"], page_from=3, page_to=4, chunk_index=0,
        config=temp_config,
    )
    ids["fraction_equiv"] = core.add_chunk(
        ids["math5"],
        "Equivalent fractions name the same amount: one half equals two quarters.",
        chapter_id=ids["ch_fractions"], page_from=5, page_to=5, chunk_index=1,
        config=temp_config,
    )
    ids["place_value"] = core.add_chunk(
        ids["math5"],
        "Place value tells the value of each digit in a number.",
        chapter_id=ids["ch_fractions"], chunk_index=2,
        config=temp_config,
    )
    ids["decimal_point"] = core.add_chunk(
        ids["math5"],
        "A decimal point separates the whole number from the tenths.",
        chapter_id=ids["ch_decimals"], page_from=12, chunk_index=0,
        config=temp_config,
    )
    ids["pizza"] = core.add_chunk(
        ids["math5"],
        "Friends shared the pizza in equal slices at the picnic.",
        config=temp_config,
    )

    # Out-of-scope chunks, all mentioning fractions
    ids["science_chunk"] = core.add_chunk(
        ids["science5"], "A fraction of sunlight is reflected by clouds.", config=temp_config,
    )
    ids["grade6_chunk"] = core.add_chunk(
        ids["math6"], "Fraction division uses the reciprocal.", config=temp_config,
    )
    ids["inactive_book_chunk"] = core.add_chunk(
        ids["old_math5"], "fraction fraction fraction from the retired edition", config=temp_config,
    )
    ids["icse_chunk"] = core.add_chunk(
        ids["icse_math5"], "ICSE fraction lesson: a fraction of a set.", config=temp_config,
    )
    ids["retired_chunk"] = core.add_chunk(
        ids["retired_math5"], "Retired fraction worksheet.", config=temp_config,
    )

    return ids


@pytest.fixture
def corpus_file(temp_dir: Path) -> Path:
    """Write a small YAML corpus file for import tests."""
    path = temp_dir / "corpus.yaml"
    path.write_text(
        """\
boards:
  - name: CBSE
    description: Central Board
    books:
      - title: Math Magic 5
        grade: 5
        subject: Math
        chapters:
          - number: 1
            title: Fractions
            chunks:
              - text: A fraction names part of a whole.
                page_from: 3
                page_to: 3
              - text: Equivalent fractions name the same amount.
          - number: 2
            title: Decimals
            chunks:
              - text: A decimal point separates whole numbers from tenths.
        chunks:
          - text: Glossary of terms used in this book.
  - name: State Board
    active: false
"""
    )
    return path
