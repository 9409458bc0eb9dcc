"""Console logging for binance-aum.

Logs go to stderr so that ``--output-format json`` leaves stdout holding
nothing but the report.
"""

from __future__ import annotations

import logging
import os
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Libraries that log every HTTP round trip and retry
_CHATTY_LOGGERS = ("urllib3", "backoff")

_LEVEL_STYLES = {
    TRACE: "\033[90m",
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_BOLD = "\033[1m"
_RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Prints the level name in bold, colored by severity."""

    def format(self, record: logging.LogRecord) -> str:
        style = _LEVEL_STYLES.get(record.levelno)
        if style is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{style}{_BOLD}{plain}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _resolve_level(name: str) -> int:
    if name == "TRACE":
        return TRACE
    return getattr(logging, name, logging.INFO)


def setup_logging(log_level: str | None = None) -> None:
    """Install the stderr console handler on the root logger.

    Args:
        log_level: Level name from the settings. Falls back to ``LOG_LEVEL``
            and then INFO. TRACE sits below DEBUG.

    At DEBUG the request and retry chatter from urllib3 and backoff is held
    at WARNING; TRACE lets it through.
    """
    name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logging.basicConfig(level=_resolve_level(name), handlers=[handler], force=True)

    chatty_level = {"DEBUG": logging.WARNING, "TRACE": TRACE}.get(name)
    if chatty_level is not None:
        for logger_name in _CHATTY_LOGGERS:
            logging.getLogger(logger_name).setLevel(chatty_level)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
