"""Tests for the SQLite schema and content matcher."""

import sqlite3

import pytest

from quickfind.core.matchers import RelationalContentMatcher, is_text_column
from quickfind.core.models import MatchKind, SkipReason


@pytest.fixture
def users_db(tmp_path, make_db):
    return make_db(
        tmp_path / "app.db",
        ["CREATE TABLE Users (Id INTEGER PRIMARY KEY, Name TEXT, Code INTEGER)"],
        [
            ("INSERT INTO Users (Name, Code) VALUES (?, ?)", ("needle works", "needle")),
            ("INSERT INTO Users (Name, Code) VALUES (?, ?)", ("plain hay", 7)),
        ],
    )


def test_is_text_column():
    assert is_text_column("TEXT")
    assert is_text_column("varchar(255)")
    assert is_text_column("NCHAR")
    assert is_text_column("CLOB")
    assert is_text_column("")
    assert is_text_column(None)
    assert not is_text_column("INTEGER")
    assert not is_text_column("REAL")
    assert not is_text_column("BLOB")


def test_text_column_content_match(users_db, insensitive):
    outcome = RelationalContentMatcher().match(users_db, insensitive("needle"))

    assert outcome.record.kind is MatchKind.DATABASE_CONTENT
    assert outcome.record.path == str(users_db)
    assert outcome.record.detail == "table: Users, column: Name, matches: 1"


def test_numeric_column_is_not_queried(users_db, insensitive):
    outcome = RelationalContentMatcher().match(users_db, insensitive("needle"))

    assert "Code" not in outcome.record.detail


def test_case_insensitive_uses_nocase(users_db, insensitive):
    outcome = RelationalContentMatcher().match(users_db, insensitive("NEEDLE"))

    assert outcome.record.detail == "table: Users, column: Name, matches: 1"


def test_case_sensitive_requires_exact_case(tmp_path, make_db, sensitive):
    db = make_db(
        tmp_path / "notes.sqlite",
        ["CREATE TABLE notes (body TEXT)"],
        [
            ("INSERT INTO notes VALUES (?)", ("Needle upper",)),
            ("INSERT INTO notes VALUES (?)", ("needle lower",)),
            ("INSERT INTO notes VALUES (?)", ("another needle",)),
        ],
    )

    lower = RelationalContentMatcher().match(db, sensitive("needle"))
    upper = RelationalContentMatcher().match(db, sensitive("Needle"))
    missing = RelationalContentMatcher().match(db, sensitive("NEEDLE"))

    assert lower.record.detail == "table: notes, column: body, matches: 2"
    assert upper.record.detail == "table: notes, column: body, matches: 1"
    assert missing.skip is SkipReason.NO_MATCH


def test_table_and_column_name_matches(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "schema.sqlite3",
        ["CREATE TABLE needle_table (needle_count INTEGER, label TEXT)"],
    )

    outcome = RelationalContentMatcher().match(db, insensitive("needle"))

    assert outcome.record.detail == (
        "table name match: needle_table; column name match: needle_table.needle_count"
    )


def test_untyped_column_is_searched(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "loose.db",
        ["CREATE TABLE loose (anything)"],
        [("INSERT INTO loose VALUES (?)", ("a needle here",))],
    )

    outcome = RelationalContentMatcher().match(db, insensitive("needle"))

    assert outcome.record.detail == "table: loose, column: anything, matches: 1"


def test_details_across_tables_are_joined(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "multi.db",
        [
            "CREATE TABLE a (x TEXT)",
            "CREATE TABLE b (y VARCHAR(20))",
        ],
        [
            ("INSERT INTO a VALUES (?)", ("needle",)),
            ("INSERT INTO b VALUES (?)", ("needle",)),
            ("INSERT INTO b VALUES (?)", ("needles",)),
        ],
    )

    outcome = RelationalContentMatcher().match(db, insensitive("needle"))

    assert outcome.record.detail == (
        "table: a, column: x, matches: 1; table: b, column: y, matches: 2"
    )


def test_identifiers_needing_quotes(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "quoted.db",
        ['CREATE TABLE "order items" ("select" TEXT, "weird""name" TEXT)'],
        [('INSERT INTO "order items" VALUES (?, ?)', ("needle", "needle"))],
    )

    outcome = RelationalContentMatcher().match(db, insensitive("needle"))

    assert outcome.record.detail == (
        "table: order items, column: select, matches: 1; "
        'table: order items, column: weird"name, matches: 1'
    )


def test_search_text_is_bound_not_interpolated(users_db, insensitive):
    outcome = RelationalContentMatcher().match(users_db, insensitive("x' OR '1'='1"))

    assert outcome.skip is SkipReason.NO_MATCH


def test_like_wildcards_are_literal(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "rates.db",
        ["CREATE TABLE rates (label TEXT)"],
        [
            ("INSERT INTO rates VALUES (?)", ("100%",)),
            ("INSERT INTO rates VALUES (?)", ("a_b",)),
            ("INSERT INTO rates VALUES (?)", ("plain",)),
        ],
    )

    percent = RelationalContentMatcher().match(db, insensitive("%"))
    underscore = RelationalContentMatcher().match(db, insensitive("_"))

    assert percent.record.detail == "table: rates, column: label, matches: 1"
    assert underscore.record.detail == "table: rates, column: label, matches: 1"


def test_internal_tables_are_excluded(tmp_path, make_db, insensitive):
    db = make_db(
        tmp_path / "seq.db",
        ["CREATE TABLE items (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)"],
        [("INSERT INTO items (name) VALUES (?)", ("x",))],
    )

    outcome = RelationalContentMatcher().match(db, insensitive("sqlite"))

    assert outcome.skip is SkipReason.NO_MATCH


def test_not_a_database_is_skipped(tmp_path, insensitive):
    fake = tmp_path / "fake.db"
    fake.write_text("needle needle needle, but not a database\n" * 20)

    outcome = RelationalContentMatcher().match(fake, insensitive("needle"))

    assert outcome.skip is SkipReason.NOT_A_DATABASE


def test_database_is_not_modified(users_db, insensitive):
    before = users_db.read_bytes()
    mtime = users_db.stat().st_mtime_ns

    RelationalContentMatcher().match(users_db, insensitive("needle"))

    assert users_db.read_bytes() == before
    assert users_db.stat().st_mtime_ns == mtime
    assert sorted(p.name for p in users_db.parent.iterdir()) == ["app.db"]


@pytest.fixture
def two_table_db(tmp_path, make_db):
    return make_db(
        tmp_path / "pair.db",
        [
            "CREATE TABLE broken (body TEXT, note TEXT)",
            "CREATE TABLE healthy (body TEXT)",
        ],
        [
            ("INSERT INTO broken VALUES (?, ?)", ("needle", "needle")),
            ("INSERT INTO healthy VALUES (?)", ("needle",)),
        ],
    )


def test_failed_column_query_does_not_stop_the_scan(two_table_db, insensitive, monkeypatch):
    matcher = RelationalContentMatcher()
    real_count = matcher._count_matches

    def locked_column(conn, table_name, column_name, policy):
        if (table_name, column_name) == ("broken", "body"):
            raise sqlite3.OperationalError("database table is locked")
        return real_count(conn, table_name, column_name, policy)

    monkeypatch.setattr(matcher, "_count_matches", locked_column)

    outcome = matcher.match(two_table_db, insensitive("needle"))

    assert outcome.record.detail == (
        "table: broken, column: note, matches: 1; table: healthy, column: body, matches: 1"
    )
    assert outcome.notes == ("column broken.body: database table is locked",)


def test_failed_table_does_not_hide_sibling_tables(two_table_db, insensitive, monkeypatch):
    matcher = RelationalContentMatcher()
    real_columns = matcher._columns

    def unreadable_table(conn, table_name):
        if table_name == "broken":
            raise sqlite3.DatabaseError("no such module: missing_module")
        return real_columns(conn, table_name)

    monkeypatch.setattr(matcher, "_columns", unreadable_table)

    outcome = matcher.match(two_table_db, insensitive("needle"))

    assert outcome.record.detail == "table: healthy, column: body, matches: 1"
    assert outcome.notes == ("table broken: no such module: missing_module",)
