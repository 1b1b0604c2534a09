"""Scraper package: web fetch & table extraction."""

from wtd.scraper.extractor import extract_table, iter_tables
from wtd.scraper.fetcher import fetch_url
from wtd.scraper.models import PageTable, RawPage

__all__ = ["fetch_url", "extract_table", "iter_tables", "RawPage", "PageTable"]
