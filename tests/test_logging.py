"""Tests for the logging helpers."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from wtd.logging import get_logger, setup_logging


@pytest.fixture
def root_logger():
    """Restore the root logger's handlers and level after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_unconfigured_library_use_prints_nothing(root_logger, capsys):
    structlog.reset_defaults()
    root_logger.setLevel(logging.WARNING)

    logger = get_logger("wtd.test")
    logger.debug("fetching_page", url="https://example.com/")
    logger.info("page_fetched", status=200)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
    assert structlog.is_configured()


def test_json_output_goes_to_stderr(root_logger, capsys):
    setup_logging("INFO", json_output=True)

    get_logger("wtd.test").info("table_extracted", rows=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "table_extracted"
    assert event["rows"] == 3
    assert event["level"] == "info"


def test_unknown_level_name_falls_back_to_warning(root_logger):
    setup_logging("chatty")
    assert root_logger.level == logging.WARNING
