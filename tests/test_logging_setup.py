"""Tests for html2epub.logging_setup."""

import logging

from rich.logging import RichHandler

from html2epub.logging_setup import setup_logging


def rich_handlers() -> list[logging.Handler]:
    logger = logging.getLogger("html2epub")
    return [h for h in logger.handlers if isinstance(h, RichHandler)]


class TestSetupLogging:
    def test_levels(self):
        setup_logging()
        assert logging.getLogger("html2epub").level == logging.INFO
        setup_logging(quiet=True)
        assert logging.getLogger("html2epub").level == logging.WARNING
        setup_logging(verbose=True, quiet=True)
        assert logging.getLogger("html2epub").level == logging.DEBUG

    def test_handler_is_replaced(self):
        setup_logging()
        setup_logging()
        assert len(rich_handlers()) == 1

    def test_console_writes_to_stderr(self):
        console = setup_logging()
        assert console.stderr

    def test_records_still_propagate(self, caplog):
        setup_logging(quiet=True)
        logging.getLogger("html2epub.core.converter").warning("gap in headings")
        assert "gap in headings" in caplog.text
