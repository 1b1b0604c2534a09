"""wtd: scrape the first table of a web page into a SQLite database."""

__version__ = "0.1.0"
