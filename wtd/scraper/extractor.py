"""Table extraction: turns page HTML into a :class:`PageTable`.

Only the first table matched by the selector is read.  Tables are located
through :func:`iter_tables`, a lazy generator over the document, so the rest
of the page is never walked once the first match is found.

Policies for table shapes the scraper does not model:

* Nested tables (``nested="skip"``, the default): every ``<table>`` found
  inside the selected table is removed before reading it.  Inner rows never
  leak into the outer grid and the enclosing cell keeps only its own text.
  ``nested="fail"`` raises :class:`NestedTableUnsupported` instead.
* PARTIAL-ROW: a data row shorter than the header is padded with empty
  strings, a longer one raises :class:`MalformedTableError`, and a row with
  no cells at all is dropped.  ``rowspan`` is not modelled: in the rows a
  spanning cell covers, the cells to its right shift one column left and the
  padding lands at the end, so those values sit under the wrong header.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Literal, Union

from bs4 import BeautifulSoup, Tag

from wtd.config import settings
from wtd.errors import MalformedTableError, NestedTableUnsupported, NoTableFound
from wtd.logging import get_logger
from wtd.scraper.models import PageTable, RawPage

logger = get_logger(__name__)

NestedPolicy = Literal["skip", "fail"]

_WHITESPACE = re.compile(r"\s+")
_MAX_COLSPAN = 1000


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _clean_text(text: str) -> str:
    """Collapse runs of whitespace (``&nbsp;`` included) and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def _cell_text(cell: Tag) -> str:
    """Concatenate the descendant text of *cell*; only ``<br>`` becomes a space."""
    for tag in cell.find_all(["script", "style"]):
        tag.decompose()
    for br in cell.find_all("br"):
        br.replace_with(" ")
    return _clean_text(cell.get_text())


def _colspan(cell: Tag) -> int:
    try:
        span = int(str(cell.get("colspan", "1")).strip())
    except ValueError:
        return 1
    return min(max(span, 1), _MAX_COLSPAN)


def _row_cells(row: Tag) -> List[str]:
    """Return the text of every ``th``/``td`` of *row*, expanding colspans."""
    cells: List[str] = []
    for cell in row.find_all(["th", "td"], recursive=False):
        text = _cell_text(cell)
        cells.extend([text] * _colspan(cell))
    return cells


def _header_names(cells: List[str]) -> List[str]:
    """Name empty headers by position and suffix duplicates with their position."""
    names: List[str] = []
    seen: set[str] = set()
    for position, raw in enumerate(cells, start=1):
        name = raw or f"column_{position}"
        candidate = name
        while candidate in seen:
            candidate = f"{name}_{position}"
            name = candidate
        seen.add(candidate)
        names.append(candidate)
    return names


def _extract_title(soup: BeautifulSoup) -> str:
    """Return the text of the ``<title>`` tag, or empty string."""
    if soup.title is None:
        return ""
    return _clean_text(soup.title.get_text())


def _strip_nested(table: Tag, policy: NestedPolicy) -> None:
    nested = table.find_all("table")
    if not nested:
        return
    if policy == "fail":
        raise NestedTableUnsupported(
            f"Selected table contains {len(nested)} nested table(s)"
        )
    # Removing the outermost nested tables takes deeper ones with them.
    outermost = [inner for inner in nested if inner.find_parent("table") is table]
    for inner in outermost:
        inner.decompose()
    logger.debug("nested_tables_skipped", count=len(nested))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def iter_tables(soup: BeautifulSoup, selector: str = "table") -> Iterator[Tag]:
    """Yield the ``<table>`` elements matching *selector*, in document order.

    The traversal is lazy: consumers that stop after the first match never
    walk the remainder of the document.
    """
    for element in soup.css.iselect(selector):
        if element.name == "table":
            yield element


def extract_table(
    html: Union[str, bytes, RawPage],
    *,
    selector: str | None = None,
    nested: NestedPolicy = "skip",
) -> PageTable:
    """Parse *html* and return its first table as a :class:`PageTable`.

    The first row of the table is the header; every following row is a data
    record.  ``PageTable.name`` is left empty: naming is done from the URL by
    :func:`wtd.db.schema.infer_schema`.

    Raises:
        NoTableFound: No element matches *selector*.
        NestedTableUnsupported: ``nested="fail"`` and the table nests others.
        MalformedTableError: The table has no header cells, or a data row has
            more cells than the header.
    """
    source_url = ""
    if isinstance(html, RawPage):
        source_url = html.url
        soup = BeautifulSoup(html.content, "html.parser", from_encoding=html.encoding)
    else:
        soup = BeautifulSoup(html, "html.parser")

    selector = selector or settings.table_selector
    table = next(iter_tables(soup, selector), None)
    if table is None:
        raise NoTableFound(f"No table matching {selector!r} found")

    _strip_nested(table, nested)

    rows = table.find_all("tr")
    if not rows:
        raise MalformedTableError("Table has no rows")

    header_cells = _row_cells(rows[0])
    if not header_cells:
        raise MalformedTableError("Table header row has no cells")
    columns = _header_names(header_cells)
    width = len(columns)

    records: List[List[str]] = []
    padded = 0
    for index, row in enumerate(rows[1:], start=2):
        cells = _row_cells(row)
        if not cells:
            continue
        if len(cells) > width:
            raise MalformedTableError(
                f"Row {index} has {len(cells)} cells, header has {width}"
            )
        if len(cells) < width:
            cells.extend([""] * (width - len(cells)))
            padded += 1
        records.append(cells)

    logger.info(
        "table_extracted",
        url=source_url or None,
        columns=width,
        rows=len(records),
        padded_rows=padded,
    )
    return PageTable(
        name="",
        columns=columns,
        rows=records,
        title=_extract_title(soup),
        source_url=source_url,
    )
