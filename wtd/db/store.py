"""Persistence of scraped tables, one SQLite table per page.

Identifiers are checked against :data:`wtd.db.schema.IDENTIFIER_PATTERN` and
double-quoted; cell values are only ever passed as bound parameters.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Sequence

from wtd.db.schema import is_safe_identifier
from wtd.errors import SchemaConflictError, StorageError
from wtd.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _quote(identifier: str) -> str:
    if not is_safe_identifier(identifier):
        raise StorageError(f"Refusing unsafe identifier {identifier!r}")
    return f'"{identifier}"'


class TableStore:
    """Create and fill page tables on an open connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements atomically.

        ``BEGIN IMMEDIATE`` takes SQLite's write lock up front, so a second
        process writing to the same file waits (up to the busy timeout)
        instead of failing half-way.  DDL is included in the transaction:
        a rollback also restores a dropped table.
        """
        try:
            self.conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot start transaction: {exc}") from exc
        try:
            yield self.conn
        except BaseException:
            self.conn.rollback()
            raise
        try:
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageError(f"Commit failed: {exc}") from exc

    @contextmanager
    def _atomic(self) -> Iterator[sqlite3.Connection]:
        if self.conn.in_transaction:
            yield self.conn
        else:
            with self.transaction() as conn:
                yield conn

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def table_exists(self, name: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (name,),
        ).fetchone()
        return row is not None

    def table_columns(self, name: str) -> List[str]:
        """Column names of *name* in declaration order (empty if absent)."""
        try:
            rows = self.conn.execute(f"PRAGMA table_info({_quote(name)})").fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot inspect table {name!r}: {exc}") from exc
        return [r[1] for r in rows]

    def row_count(self, name: str) -> int:
        try:
            row = self.conn.execute(f"SELECT COUNT(*) FROM {_quote(name)}").fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot count rows of {name!r}: {exc}") from exc
        return row[0]

    def list_tables(self) -> List[str]:
        rows = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
        return [r[0] for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def ensure_table(
        self,
        name: str,
        columns: Sequence[str],
        *,
        replace: bool = True,
    ) -> None:
        """Make sure table *name* exists with exactly *columns* (all TEXT).

        With ``replace`` the table is dropped and recreated, so re-running a
        page rebuilds it instead of accumulating rows.  Without it an existing
        table is kept when its columns match, and rejected otherwise.

        Raises:
            SchemaConflictError: ``replace`` is off and the existing table has
                a different column list.
            StorageError: Any SQLite failure.
        """
        table = _quote(name)
        column_sql = ", ".join(f"{_quote(c)} TEXT" for c in columns)
        if not column_sql:
            raise StorageError(f"Table {name!r} needs at least one column")

        try:
            with self._atomic() as conn:
                if replace:
                    conn.execute(f"DROP TABLE IF EXISTS {table}")
                elif self.table_exists(name):
                    existing = self.table_columns(name)
                    if [c.lower() for c in existing] != [c.lower() for c in columns]:
                        raise SchemaConflictError(name, existing, list(columns))
                    logger.info("table_reused", table=name)
                    return
                conn.execute(f"CREATE TABLE {table} ({column_sql})")
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to create table {name!r}: {exc}") from exc

        logger.info("table_created", table=name, columns=len(columns), replaced=replace)

    def insert_rows(self, name: str, rows: Sequence[Sequence[str]]) -> int:
        """Insert *rows* into *name* with one parameterized statement.

        All rows land in a single transaction: either every row is written or
        none is.

        Returns:
            The number of rows inserted.

        Raises:
            StorageError: Any SQLite failure, including a row whose width does
                not match the table.
        """
        if not rows:
            return 0

        width = len(rows[0])
        placeholders = ", ".join("?" for _ in range(width))
        sql = f"INSERT INTO {_quote(name)} VALUES ({placeholders})"

        try:
            with self._atomic() as conn:
                conn.executemany(sql, rows)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to insert into {name!r}: {exc}") from exc

        logger.info("rows_inserted", table=name, rows=len(rows))
        return len(rows)
