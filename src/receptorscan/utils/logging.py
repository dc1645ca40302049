"""Logging configuration for receptorscan.

Every module logs through ``logging.getLogger(__name__)`` below the
``receptorscan`` package logger. ``setup_logging`` attaches the handlers
once per command:

- a rich console handler whose level follows ``-v`` / ``-q``
- an optional run log (``<outdir>/log.txt``) that is appended to, never
  truncated, and always records DEBUG

Example:
    >>> import logging
    >>> from receptorscan.utils.logging import setup_logging, log_run_start
    >>> setup_logging(verbosity=2, log_file="result/log.txt")
    >>> log_run_start(logging.getLogger("receptorscan"), "RLK identification", Input="proteins.fa")
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any

# =============================================================================
# Constants
# =============================================================================

PACKAGE_LOGGER = "receptorscan"

# Run log lines carry a timestamp; the console relies on rich for that
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "%(message)s"

VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


# =============================================================================
# Setup
# =============================================================================


def _console_handler(level: int, use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
    handler.setLevel(level)
    return handler


def _run_log_handler(log_file: Path | str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Handlers from an earlier call are closed and replaced, so repeated
    commands in one process never log twice.

    Args:
        verbosity: 0 = warnings only, 1 = info, 2 = debug.
        log_file: Run log to append to.
        use_rich: Use rich for console output.

    Returns:
        The ``receptorscan`` logger.
    """
    console_level = VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(console_level, use_rich))
    if log_file is not None:
        logger.addHandler(_run_log_handler(log_file))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)

    return logger


def log_run_start(logger: logging.Logger, description: str, **details: Any) -> None:
    """Write a run banner: what is starting, when, and on which inputs.

    Args:
        logger: Logger to write to.
        description: Workflow name.
        **details: ``label=value`` pairs, logged one per line.
    """
    logger.info(f"{description} started at {datetime.now():%Y-%m-%d %H:%M:%S}")
    for label, value in details.items():
        if value is not None:
            logger.info(f"  {label}: {value}")


# =============================================================================
# Timing
# =============================================================================


class Timer:
    """Context manager that logs how long a workflow stage took.

    The elapsed time is logged even when the stage raises.

    Example:
        >>> with Timer("Domain filtering", logger):
        ...     filter_overlaps(domains)
        # Logs: "Domain filtering finished in 0.12s"
    """

    def __init__(self, description: str, logger: logging.Logger | None = None) -> None:
        self.description = description
        self.logger = logger or logging.getLogger(PACKAGE_LOGGER)
        self.elapsed: float = 0.0
        self._started: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.monotonic()
        return self

    def __exit__(self, exc_type: Any, *args: Any) -> None:
        self.elapsed = time.monotonic() - self._started
        outcome = "failed after" if exc_type is not None else "finished in"
        self.logger.info(f"{self.description} {outcome} {self.elapsed:.2f}s")
