"""One-shot scrape pipeline.

``run_pipeline`` takes one URL from the network to the database:

    fetch → extract first table → infer schema → ensure table → insert rows

Nothing touches the database until the page has been fetched and its table
extracted, so a network or parse failure leaves the file as it was.  Table
creation and row insertion share one transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from wtd.config import settings
from wtd.db.connection import get_connection
from wtd.db.schema import infer_schema
from wtd.db.store import TableStore
from wtd.logging import get_logger
from wtd.scraper.extractor import NestedPolicy, extract_table
from wtd.scraper.fetcher import fetch_url

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    url: str
    db_path: Path
    table_name: str
    columns: List[str] = field(default_factory=list)
    rows_inserted: int = 0
    title: str = ""


def run_pipeline(
    url: str,
    db_path: Optional[Union[str, Path]] = None,
    *,
    selector: Optional[str] = None,
    nested: NestedPolicy = "skip",
    replace: bool = True,
    timeout: Optional[float] = None,
) -> PipelineResult:
    """Scrape the first table of *url* into the SQLite file at *db_path*.

    Args:
        url: Page to scrape.
        db_path: Database file.  Defaults to ``settings.database``.
        selector: CSS selector locating the table.  Defaults to
            ``settings.table_selector``.
        nested: ``"skip"`` or ``"fail"``, see :mod:`wtd.scraper.extractor`.
        replace: Drop and rebuild an existing table (default) instead of
            appending to it.
        timeout: Fetch timeout in seconds.

    Returns:
        A :class:`PipelineResult` describing what was written.

    Raises:
        WtdError: Any stage failure; nothing is committed in that case.
    """
    path = Path(db_path or settings.database)

    # ------------------------------------------------------------------
    # Fetch, extract and name: no database access yet
    # ------------------------------------------------------------------
    raw = fetch_url(url, timeout=timeout)
    table = extract_table(raw, selector=selector, nested=nested)
    schema = infer_schema(url, table)
    table.name = schema.table_name

    # ------------------------------------------------------------------
    # Store atomically
    # ------------------------------------------------------------------
    conn = get_connection(path)
    try:
        store = TableStore(conn)
        with store.transaction():
            store.ensure_table(table.name, schema.column_names, replace=replace)
            inserted = store.insert_rows(table.name, table.rows)
    finally:
        conn.close()

    logger.info(
        "pipeline_complete",
        url=url,
        table=table.name,
        rows=inserted,
        db=str(path),
    )
    return PipelineResult(
        url=url,
        db_path=path,
        table_name=table.name,
        columns=schema.column_names,
        rows_inserted=inserted,
        title=table.title,
    )
