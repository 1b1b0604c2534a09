"""Database layer package.

Public re-exports so callers can write::

    from wtd.db import get_connection, TableStore, infer_schema
"""

from wtd.db.connection import get_connection
from wtd.db.schema import TableSchema, infer_schema, sanitize_identifier
from wtd.db.store import TableStore

__all__ = [
    "get_connection",
    "TableStore",
    "TableSchema",
    "infer_schema",
    "sanitize_identifier",
]
