"""Tests for the database layer (connection factory + TableStore).

Most tests use an in-memory SQLite database; tests that care about the file
on disk use ``tmp_path``.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Generator

import pytest

from wtd.db.connection import get_connection
from wtd.db.store import TableStore
from wtd.errors import SchemaConflictError, StorageError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    connection = get_connection(db_path=":memory:")
    yield connection
    connection.close()


@pytest.fixture()
def store(conn: sqlite3.Connection) -> TableStore:
    return TableStore(conn)


# ---------------------------------------------------------------------------
# connection
# ---------------------------------------------------------------------------

class TestConnection:
    def test_creates_file_and_parent_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "wiki.db"
        connection = get_connection(path)
        connection.close()
        assert path.exists()

    def test_wal_mode_on_disk(self, tmp_path: Path) -> None:
        connection = get_connection(tmp_path / "wiki.db")
        try:
            row = connection.execute("PRAGMA journal_mode").fetchone()
        finally:
            connection.close()
        assert row[0] == "wal"

    def test_unopenable_path_raises_storage_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(StorageError):
            get_connection(blocker / "wiki.db")


# ---------------------------------------------------------------------------
# ensure_table
# ---------------------------------------------------------------------------

class TestEnsureTable:
    def test_creates_text_columns(self, store: TableStore, conn: sqlite3.Connection) -> None:
        store.ensure_table("Countries", ["Rank", "Country", "Population"])

        info = conn.execute('PRAGMA table_info("Countries")').fetchall()
        assert [r[1] for r in info] == ["Rank", "Country", "Population"]
        assert {r[2] for r in info} == {"TEXT"}

    def test_replace_drops_existing_rows(self, store: TableStore) -> None:
        store.ensure_table("T", ["A"])
        store.insert_rows("T", [["1"], ["2"]])

        store.ensure_table("T", ["A", "B"])

        assert store.table_columns("T") == ["A", "B"]
        assert store.row_count("T") == 0

    def test_keep_matching_table(self, store: TableStore) -> None:
        store.ensure_table("T", ["A", "B"])
        store.insert_rows("T", [["1", "2"]])

        store.ensure_table("T", ["A", "B"], replace=False)

        assert store.row_count("T") == 1

    def test_conflicting_columns_raise(self, store: TableStore) -> None:
        store.ensure_table("T", ["A", "B"])

        with pytest.raises(SchemaConflictError) as info:
            store.ensure_table("T", ["A", "C"], replace=False)

        assert info.value.existing == ["A", "B"]
        assert info.value.exit_code == 3
        assert store.table_columns("T") == ["A", "B"]

    def test_create_without_replace_when_absent(self, store: TableStore) -> None:
        store.ensure_table("Fresh", ["X"], replace=False)
        assert store.table_exists("Fresh")

    def test_unsafe_table_name_rejected(self, store: TableStore) -> None:
        with pytest.raises(StorageError):
            store.ensure_table('x"; DROP TABLE y; --', ["A"])

    def test_unsafe_column_name_rejected(self, store: TableStore) -> None:
        with pytest.raises(StorageError):
            store.ensure_table("T", ["ok", "bad name"])

    def test_no_columns_rejected(self, store: TableStore) -> None:
        with pytest.raises(StorageError):
            store.ensure_table("T", [])


# ---------------------------------------------------------------------------
# insert_rows
# ---------------------------------------------------------------------------

class TestInsertRows:
    def test_rows_inserted_in_order(self, store: TableStore, conn: sqlite3.Connection) -> None:
        store.ensure_table("T", ["Rank", "Country"])
        count = store.insert_rows("T", [["1", "China"], ["2", "India"]])

        assert count == 2
        rows = conn.execute('SELECT Rank, Country FROM "T" ORDER BY rowid').fetchall()
        assert rows == [("1", "China"), ("2", "India")]

    def test_empty_rows_is_noop(self, store: TableStore) -> None:
        store.ensure_table("T", ["A"])
        assert store.insert_rows("T", []) == 0
        assert store.row_count("T") == 0

    def test_injection_text_stored_verbatim(self, store: TableStore, conn: sqlite3.Connection) -> None:
        payload = "'); DROP TABLE x;--"
        store.ensure_table("x", ["A"])
        store.insert_rows("x", [[payload]])

        assert store.table_exists("x")
        assert conn.execute('SELECT A FROM "x"').fetchone()[0] == payload

    def test_values_stay_text(self, store: TableStore, conn: sqlite3.Connection) -> None:
        store.ensure_table("T", ["Rank"])
        store.insert_rows("T", [["1"]])

        row = conn.execute('SELECT typeof(Rank), Rank FROM "T" WHERE Rank = 1').fetchone()
        assert row == ("text", "1")

    def test_width_mismatch_rolls_back_all_rows(self, store: TableStore) -> None:
        store.ensure_table("T", ["A", "B"])

        with pytest.raises(StorageError):
            store.insert_rows("T", [["1", "2"], ["3"]])

        assert store.row_count("T") == 0

    def test_missing_table_raises(self, store: TableStore) -> None:
        with pytest.raises(StorageError):
            store.insert_rows("Nope", [["1"]])


# ---------------------------------------------------------------------------
# transactions & introspection
# ---------------------------------------------------------------------------

class TestTransaction:
    def test_rollback_restores_dropped_table(self, store: TableStore) -> None:
        store.ensure_table("T", ["A"])
        store.insert_rows("T", [["kept"]])

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.ensure_table("T", ["A", "B"])
                raise RuntimeError("boom")

        assert store.table_columns("T") == ["A"]
        assert store.row_count("T") == 1

    def test_commit_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "wiki.db"
        connection = get_connection(path)
        try:
            s = TableStore(connection)
            with s.transaction():
                s.ensure_table("T", ["A"])
                s.insert_rows("T", [["1"], ["2"]])
        finally:
            connection.close()

        reopened = get_connection(path)
        try:
            assert TableStore(reopened).row_count("T") == 2
        finally:
            reopened.close()

    def test_list_tables(self, store: TableStore) -> None:
        store.ensure_table("B_table", ["A"])
        store.ensure_table("A_table", ["A"])
        assert store.list_tables() == ["A_table", "B_table"]

    def test_table_columns_absent_table(self, store: TableStore) -> None:
        assert store.table_columns("Missing") == []
        assert not store.table_exists("Missing")
