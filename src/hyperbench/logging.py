"""Logging setup for hyperbench.

Benchmark runs report their progress one case at a time through the
``hyperbench`` logger.  The console handler writes to stderr so that
stdout stays free for the report table or a JSON document, and stamps
every line with the time elapsed since the run started::

    [    0.41s] parse/small: 1200 batches
    [    0.93s] parse/large: 1200 batches
    [    0.93s] warning: No iterations sampled for db/query, omitting from reports

A file handler, when requested, always records DEBUG detail with
absolute timestamps and logger names.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

_LOGGER_NAME = "hyperbench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class ProgressFormatter(logging.Formatter):
    """Console formatter prefixing each line with elapsed run time.

    INFO and DEBUG lines carry only the message; WARNING and above are
    tagged with the lowercased level name.
    """

    def __init__(self, start: float | None = None) -> None:
        super().__init__("%(message)s")
        self.start = time.time() if start is None else start

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        elapsed = max(record.created - self.start, 0.0)
        if record.levelno >= logging.WARNING:
            message = f"{record.levelname.lower()}: {message}"
        return f"[{elapsed:8.2f}s] {message}"


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the root hyperbench logger.

    Calling this again replaces the handlers installed by a previous call
    and restarts the elapsed-time clock.

    Args:
        verbose: If True, show DEBUG detail on the console.
        quiet: If True, show only warnings and errors on the console.
            Ignored if *verbose* is True.
        log_file: If provided, also log everything at DEBUG level to
            this path.

    Returns:
        The configured ``hyperbench`` logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if verbose:
        console.setLevel(logging.DEBUG)
    elif quiet:
        console.setLevel(logging.WARNING)
    else:
        console.setLevel(logging.INFO)
    console.setFormatter(ProgressFormatter())
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named child logger under the hyperbench namespace."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
