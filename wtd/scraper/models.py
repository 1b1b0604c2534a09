"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    content: bytes
    status_code: int
    encoding: Optional[str] = None


@dataclass
class PageTable:
    """The first table of a page as a grid of cell text.

    ``rows`` are aligned positionally with ``columns``: every row holds exactly
    ``len(columns)`` cells.
    """

    name: str
    columns: List[str]
    rows: List[List[str]] = field(default_factory=list)
    title: str = ""
    source_url: str = ""

    @property
    def row_count(self) -> int:
        return len(self.rows)
