"""Logging setup for timed.

Library modules log through ``logging.getLogger("timed")`` (or a child
from :func:`get_logger`) and never install handlers themselves.  The CLI
calls :func:`setup_logging` once, mapping ``--verbose``/``--quiet`` to
the console level and ``--log-file`` to a DEBUG file handler.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "timed"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(message)s"
_VERBOSE_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a log level; *verbose* wins."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the ``timed`` logger.

    Calling this again replaces the previously installed handlers.

    Args:
        verbose: Console logs at DEBUG, with level and logger name.
        quiet: Console logs at WARNING. Ignored if *verbose* is True.
        log_file: If provided, also log everything at DEBUG to this path.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level(verbose=verbose, quiet=quiet))
    console.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger ``timed.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
