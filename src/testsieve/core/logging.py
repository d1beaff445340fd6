"""Logging configuration for testsieve.

Console logging goes through a Rich handler so filter decisions logged
at DEBUG level are readable next to the selection table.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"

LOGGER_NAME = "testsieve"


def setup_logging(verbose: bool = False, level: Optional[str] = None) -> logging.Logger:
    """Configure the testsieve logger with a Rich handler.

    Args:
        verbose: If True, log at DEBUG level, which includes one line per
                 filter decision. Otherwise only warnings and errors are shown.
        level: Explicit level name (e.g. "info") used when not verbose.

    Returns:
        The configured ``testsieve`` logger.

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.debug("Evaluating suite...")
    """
    if verbose:
        log_level = logging.DEBUG
    elif level:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.WARNING
    else:
        log_level = logging.WARNING

    # Logs go to stderr so JSON written to stdout stays parseable
    rich_handler = RichHandler(
        console=Console(stderr=True),
        level=log_level,
        show_time=True,
        show_level=True,
        show_path=True,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Calling setup twice must not duplicate output
    logger.handlers.clear()
    logger.addHandler(rich_handler)
    logger.propagate = False

    return logger

