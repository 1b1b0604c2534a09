"""wtd CLI: scrape the first table of a page into a SQLite database.

Usage:
    wtd https://en.wikipedia.org/wiki/Member_states_of_the_United_Nations
    wtd https://en.wikipedia.org/wiki/Member_states_of_the_United_Nations myDataBase.db
    python cli/main.py --help

Exit codes: 0 success, 1 network failure, 2 parse failure, 3 storage failure.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from wtd.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import Optional

import typer

from wtd.config import settings
from wtd.errors import WtdError
from wtd.logging import setup_logging
from wtd.pipeline import run_pipeline

app = typer.Typer(
    name="wtd",
    help="Scrape the first table of a web page into a SQLite database.",
    add_completion=False,
)


@app.command()
def main(
    url: str = typer.Argument(..., help="The url to pull information from."),
    file_name: Optional[Path] = typer.Argument(
        None,
        help="Database file to write to. Defaults to wikiDatabase.db.",
        show_default=False,
    ),
    selector: Optional[str] = typer.Option(
        None, "--selector", help="CSS selector for the table (default: first <table>)."
    ),
    fail_on_nested: bool = typer.Option(
        False, "--fail-on-nested", help="Fail instead of skipping tables nested in cells."
    ),
    append: bool = typer.Option(
        False,
        "--append",
        help="Append to an existing table with the same columns instead of rebuilding it.",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Fetch timeout in seconds.", min=0.1
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines."),
) -> None:
    """Scrape URL and store its first table, named after the URL's last path segment."""
    setup_logging(logging.INFO if verbose else settings.log_level, json_output=json_logs)

    db_path = file_name or settings.database
    try:
        result = run_pipeline(
            url,
            db_path,
            selector=selector,
            nested="fail" if fail_on_nested else "skip",
            replace=not append,
            timeout=timeout,
        )
    except WtdError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code)

    typer.echo(f"Table   : {result.table_name}")
    typer.echo(f"Columns : {', '.join(result.columns)}")
    typer.echo(f"Rows    : {result.rows_inserted}")
    typer.echo(f"Database: {result.db_path}")
    typer.echo("Success!")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
