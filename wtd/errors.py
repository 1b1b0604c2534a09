"""Error taxonomy.

Every stage raises a subclass of :class:`WtdError`.  Library code never exits
the process; only the CLI turns an error into an exit status, using the
``exit_code`` carried by each class:

    1  network  (NetworkError, HttpError)
    2  parse    (NoTableFound, MalformedTableError, NestedTableUnsupported)
    3  storage  (SchemaConflictError, StorageError)
"""

from __future__ import annotations

EXIT_NETWORK = 1
EXIT_PARSE = 2
EXIT_STORAGE = 3


class WtdError(Exception):
    """Base class for all errors raised by wtd."""

    exit_code: int = 1


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------

class NetworkError(WtdError):
    """The page could not be reached (DNS, refused connection, timeout)."""

    exit_code = EXIT_NETWORK


class HttpError(WtdError):
    """The server answered with a 4xx/5xx status."""

    exit_code = EXIT_NETWORK

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Request to {url} failed with HTTP {status_code}")
        self.url = url
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class NoTableFound(WtdError):
    exit_code = EXIT_PARSE


class MalformedTableError(WtdError):
    exit_code = EXIT_PARSE


class NestedTableUnsupported(WtdError):
    exit_code = EXIT_PARSE


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class SchemaConflictError(WtdError):
    """An existing table has a different column set than the scraped one."""

    exit_code = EXIT_STORAGE

    def __init__(self, table: str, existing: list[str], wanted: list[str]) -> None:
        super().__init__(
            f"Table {table!r} already exists with columns {existing}, "
            f"cannot store columns {wanted}"
        )
        self.table = table
        self.existing = existing
        self.wanted = wanted


class StorageError(WtdError):
    exit_code = EXIT_STORAGE
