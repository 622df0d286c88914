"""
Logging for pinghistory.

Startup (redacted DSN, schema result) and failed history writes are logged
through `get_logger(__name__)`; the CLI `--log-level` flag and LOG_LEVEL
reach the root logger via `set_level()`.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _init_logging() -> None:
    """Configure the root logger once."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)
    _initialized = True


def set_level(level: str) -> None:
    """
    Change the root log level, e.g. from the CLI `--log-level` flag.

    Args:
        level: Level name such as "DEBUG" or "warning".
    """
    _init_logging()
    logging.getLogger().setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)
