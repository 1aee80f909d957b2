"""Logging setup for the CLI."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO; kept at WARNING unless something is wrong
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(debug: bool = False, log_format: str | None = None) -> None:
    """Configure the root logger.

    Logs go to stderr so that command output on stdout stays parseable.

    Args:
        debug: Log at DEBUG instead of WARNING.
        log_format: Optional custom format string.
    """
    level = logging.DEBUG if debug else logging.WARNING

    logging.basicConfig(
        level=level,
        format=log_format or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
