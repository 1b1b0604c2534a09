"""Schema inference: table and column identifiers from untrusted input.

Table names come from the page URL and column names from the page's header
row, so both are attacker-controlled.  Every identifier goes through
:func:`sanitize_identifier`, which applies these rules in order:

1. replace every character outside ``[A-Za-z0-9_]`` with ``_``;
2. collapse runs of ``_`` into one;
3. strip leading and trailing ``_``;
4. an empty result is replaced by the caller's fallback;
5. a leading digit gets a ``_`` prefix;
6. a ``sqlite_`` prefix (reserved by SQLite) gets a ``t_`` prefix.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List
from urllib.parse import unquote, urlparse

from wtd.scraper.models import PageTable

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_DISALLOWED = re.compile(r"[^A-Za-z0-9_]")
_UNDERSCORES = re.compile(r"_+")

DEFAULT_TABLE_NAME = "page_table"


@dataclass
class ColumnDef:
    name: str
    sql_type: str = "TEXT"


@dataclass
class TableSchema:
    table_name: str
    columns: List[ColumnDef] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sanitize_identifier(raw: str, fallback: str) -> str:
    """Rewrite *raw* into a safe SQL identifier (see module docstring)."""
    name = _DISALLOWED.sub("_", raw)
    name = _UNDERSCORES.sub("_", name).strip("_")
    if not name:
        name = fallback
    if name[0].isdigit():
        name = f"_{name}"
    if name.lower().startswith("sqlite_"):
        name = f"t_{name}"
    return name


def is_safe_identifier(name: str) -> bool:
    """Return ``True`` if *name* can be double-quoted into SQL verbatim."""
    return bool(IDENTIFIER_PATTERN.match(name))


def slug_from_url(url: str) -> str:
    """Return the last non-empty path segment of *url*, percent-decoded.

    Falls back to the host name when the path is empty, and to an empty
    string when there is neither.

    >>> slug_from_url("https://en.wikipedia.org/wiki/Member_states_of_the_United_Nations")
    'Member_states_of_the_United_Nations'
    """
    parsed = urlparse(url)
    segments = [s for s in parsed.path.split("/") if s]
    if segments:
        return unquote(segments[-1])
    return parsed.hostname or ""


def unique_columns(headers: List[str]) -> List[str]:
    """Sanitize *headers* and make them unique, ignoring case.

    SQLite treats ``Rank`` and ``rank`` as the same column, so collisions are
    detected case-insensitively and resolved by appending ``_<position>``.
    """
    names: List[str] = []
    seen: set[str] = set()
    for position, header in enumerate(headers, start=1):
        name = sanitize_identifier(header, fallback=f"column_{position}")
        while name.lower() in seen:
            name = f"{name}_{position}"
        seen.add(name.lower())
        names.append(name)
    return names


def infer_schema(url: str, table: PageTable) -> TableSchema:
    """Derive the destination table name and all-TEXT column definitions."""
    table_name = sanitize_identifier(slug_from_url(url), fallback=DEFAULT_TABLE_NAME)
    columns = [ColumnDef(name=name) for name in unique_columns(table.columns)]
    return TableSchema(table_name=table_name, columns=columns)
