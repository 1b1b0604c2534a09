"""SQLite connection factory.

Usage::

    from wtd.db.connection import get_connection

    conn = get_connection("wikiDatabase.db")
    try:
        ...
    finally:
        conn.close()
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from wtd.config import settings
from wtd.errors import StorageError


def get_connection(db_path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Steps performed on every new connection:
    1. Create the parent directory of the database file if needed.
    2. Set a busy timeout so concurrent runs wait on SQLite's file lock.
    3. Switch to WAL journal mode for concurrent readers.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.database``.

    Raises:
        StorageError: The file cannot be created or opened.
    """
    path = db_path or settings.database

    try:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path), timeout=settings.db_timeout)
    except (OSError, sqlite3.Error) as exc:
        raise StorageError(f"Cannot open database {str(path)!r}: {exc}") from exc

    try:
        conn.execute("PRAGMA journal_mode = WAL")
    except sqlite3.Error as exc:
        conn.close()
        raise StorageError(f"Cannot open database {str(path)!r}: {exc}") from exc

    return conn
