import sqlite3
from pathlib import Path
from typing import Iterable, Sequence

import pytest

from quickfind.config import Settings
from quickfind.core.engine import TraversalEngine
from quickfind.core.models import ComparisonPolicy


@pytest.fixture
def settings() -> Settings:
    return Settings(max_json_file_bytes=50 * 1024 * 1024, log_level="WARNING")


@pytest.fixture
def engine(settings: Settings) -> TraversalEngine:
    return TraversalEngine(settings)


@pytest.fixture
def insensitive():
    """Build a case-insensitive policy for a search text."""
    return lambda text: ComparisonPolicy(search_text=text, case_sensitive=False)


@pytest.fixture
def sensitive():
    """Build a case-sensitive policy for a search text."""
    return lambda text: ComparisonPolicy(search_text=text, case_sensitive=True)


def make_database(path: Path, statements: Iterable[str], rows: Sequence[tuple] = ()) -> Path:
    """Create a SQLite file from DDL statements and (sql, params) row inserts."""
    conn = sqlite3.connect(path)
    try:
        with conn:
            for statement in statements:
                conn.execute(statement)
            for sql, params in rows:
                conn.execute(sql, params)
    finally:
        conn.close()
    return path


@pytest.fixture
def make_db():
    return make_database
