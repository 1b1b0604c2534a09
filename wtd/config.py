"""Centralised settings for wtd.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the current working
directory (loaded automatically when this module is imported).  Command-line
flags override these per run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path.cwd() / ".env", override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    database: Path = field(
        default_factory=lambda: Path(os.environ.get("WTD_DATABASE", "wikiDatabase.db"))
    )
    db_timeout: float = field(
        default_factory=lambda: float(os.environ.get("WTD_DB_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("WTD_REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "WTD_USER_AGENT",
            "Mozilla/5.0 (compatible; wtd/0.1; wikipedia table scraper)",
        )
    )

    # ------------------------------------------------------------------
    # Extractor
    # ------------------------------------------------------------------
    table_selector: str = field(
        default_factory=lambda: os.environ.get("WTD_TABLE_SELECTOR", "table")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("WTD_LOG_LEVEL", "WARNING")
    )


# Module-level singleton, import this everywhere:
#   from wtd.config import settings
settings = Settings()
