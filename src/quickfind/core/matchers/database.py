"""Schema and content matcher for embedded SQLite database files.

The database is opened read-only. For every user table the matcher checks:

1. The table name
2. Each column name (from PRAGMA table_info)
3. The contents of every text-like column, counted inside SQLite with a
   bound `LIKE` pattern so rows are never materialized in Python

Table and column names are only ever taken from the database's own schema
and are quoted by the SQLAlchemy compiler. The search text is always a bound
parameter.
"""

import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import column, create_engine, func, inspect, select, table
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from quickfind.core.exceptions import MatcherError
from quickfind.core.matchers.base import BaseMatcher
from quickfind.core.models import (
    LIKE_ESCAPE, ComparisonPolicy, MatchKind, MatchOutcome, MatchRecord, SkipReason
)

# Declared-type fragments SQLite maps to TEXT affinity
TEXT_TYPE_MARKERS = ("text", "char", "clob")


def is_text_column(declared_type: Optional[str]) -> bool:
    """Check whether a column is eligible for content search.

    Untyped columns count as text, following SQLite's dynamic typing.

    Examples:
        >>> is_text_column("VARCHAR(40)")
        True
        >>> is_text_column("")
        True
        >>> is_text_column("INTEGER")
        False
    """
    if not declared_type:
        return True
    lowered = declared_type.lower()
    return any(marker in lowered for marker in TEXT_TYPE_MARKERS)


def open_read_only(path: Path) -> Engine:
    """Create an engine bound to a read-only SQLite URI for `path`.

    NullPool makes engine.dispose() close the underlying connection.
    """
    uri = f"{path.resolve().as_uri()}?mode=ro"
    return create_engine(
        "sqlite://",
        creator=lambda: sqlite3.connect(uri, uri=True),
        poolclass=NullPool,
    )


def _require_known(identifier: str, known: Iterable[str], kind: str) -> str:
    if identifier not in known:
        raise MatcherError(f"{kind} {identifier!r} is not part of the introspected schema", "database")
    return identifier


class RelationalContentMatcher(BaseMatcher):
    """Matches table names, column names and text column contents."""

    @property
    def name(self) -> str:
        return "database"

    def match(self, path: Path, policy: ComparisonPolicy) -> MatchOutcome:
        details: List[str] = []
        notes: List[str] = []

        try:
            engine = open_read_only(path)
        except (SQLAlchemyError, sqlite3.Error) as e:
            return MatchOutcome.skipped(SkipReason.NOT_A_DATABASE, str(e))

        try:
            with engine.connect() as conn:
                table_names = inspect(conn).get_table_names()
                for table_name in table_names:
                    try:
                        details.extend(self._scan_table(conn, table_name, table_names, policy, notes))
                    except (SQLAlchemyError, sqlite3.Error, MatcherError) as e:
                        notes.append(f"table {table_name}: {e}")
        except (SQLAlchemyError, sqlite3.Error) as e:
            return MatchOutcome.skipped(SkipReason.NOT_A_DATABASE, str(e))
        finally:
            engine.dispose()

        if not details:
            return MatchOutcome.skipped(SkipReason.NO_MATCH, notes=tuple(notes))

        return MatchOutcome.matched(
            MatchRecord(
                path=str(path),
                kind=MatchKind.DATABASE_CONTENT,
                detail="; ".join(details),
            ),
            notes=tuple(notes),
        )

    def _scan_table(
        self,
        conn: Connection,
        table_name: str,
        known_tables: Sequence[str],
        policy: ComparisonPolicy,
        notes: List[str],
    ) -> List[str]:
        details: List[str] = []
        # Every identifier reaching PRAGMA or SELECT must come from introspection
        table_name = _require_known(table_name, known_tables, "table")

        if policy.contains(table_name):
            details.append(f"table name match: {table_name}")

        columns = self._columns(conn, table_name)
        column_names = [name for name, _ in columns]

        for column_name, _ in columns:
            if policy.contains(column_name):
                details.append(f"column name match: {table_name}.{column_name}")

        for column_name, declared_type in columns:
            if not is_text_column(declared_type):
                continue
            try:
                count = self._count_matches(
                    conn,
                    table_name,
                    _require_known(column_name, column_names, "column"),
                    policy,
                )
            except (SQLAlchemyError, sqlite3.Error) as e:
                notes.append(f"column {table_name}.{column_name}: {e}")
                continue

            if count > 0:
                details.append(f"table: {table_name}, column: {column_name}, matches: {count}")

        return details

    def _columns(self, conn: Connection, table_name: str) -> List[Tuple[str, str]]:
        """Return (name, declared type) pairs in column order."""
        quoted = conn.dialect.identifier_preparer.quote_identifier(table_name)
        rows = conn.exec_driver_sql(f"PRAGMA table_info({quoted})").fetchall()
        return [(row[1], row[2] or "") for row in rows]

    def _count_matches(
        self,
        conn: Connection,
        table_name: str,
        column_name: str,
        policy: ComparisonPolicy,
    ) -> int:
        target = column(column_name)
        subject = target.collate(policy.sql_collation) if policy.sql_collation else target

        condition = subject.like(policy.like_pattern, escape=LIKE_ESCAPE)
        if policy.case_sensitive:
            # SQLite's LIKE ignores ASCII case; instr() confirms the exact bytes
            condition = condition & (func.instr(target, policy.search_text) > 0)

        stmt = select(func.count()).select_from(table(table_name)).where(condition)
        return int(conn.execute(stmt).scalar_one())
