"""Tests for timed.logging — CLI logging setup."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from timed.logging import LOGGER_NAME, console_level, get_logger, setup_logging


class TestConsoleLevel(unittest.TestCase):
    """Tests for console_level()."""

    def test_default(self) -> None:
        """INFO by default."""
        self.assertEqual(console_level(), logging.INFO)

    def test_verbose(self) -> None:
        """--verbose selects DEBUG."""
        self.assertEqual(console_level(verbose=True), logging.DEBUG)

    def test_quiet(self) -> None:
        """--quiet selects WARNING."""
        self.assertEqual(console_level(quiet=True), logging.WARNING)

    def test_verbose_wins(self) -> None:
        """--verbose beats --quiet."""
        self.assertEqual(console_level(verbose=True, quiet=True), logging.DEBUG)


class TestSetupLogging(unittest.TestCase):
    """Tests for setup_logging()."""

    def setUp(self) -> None:
        self.addCleanup(self._reset)

    def _reset(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_console_handler(self) -> None:
        """One console handler at the chosen level."""
        logger = setup_logging(quiet=True)
        self.assertEqual(logger.name, "timed")
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.handlers[0].level, logging.WARNING)

    def test_repeated_setup_replaces_handlers(self) -> None:
        """Calling setup again does not stack handlers."""
        setup_logging()
        logger = setup_logging(verbose=True)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.handlers[0].level, logging.DEBUG)

    def test_log_file_gets_debug(self) -> None:
        """The log file records DEBUG messages with logger names."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "timed.log"
            logger = setup_logging(quiet=True, log_file=path)
            self.assertEqual(len(logger.handlers), 2)
            get_logger("test").debug("calibrated %d cycles", 42)
            self._reset()
            text = path.read_text()
        self.assertIn("timed.test", text)
        self.assertIn("calibrated 42 cycles", text)


class TestGetLogger(unittest.TestCase):
    """Tests for get_logger()."""

    def test_child_of_package_logger(self) -> None:
        """Module loggers are children of the package logger."""
        package = logging.getLogger(LOGGER_NAME)
        logger = get_logger("bench")
        self.assertEqual(logger.name, "timed.bench")
        self.assertIs(logger.parent, package)


if __name__ == "__main__":
    unittest.main()
