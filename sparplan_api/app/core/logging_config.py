"""
Logging configuration for the application.

``setup_logging`` configures the root logger with a console handler
and an optional file handler, exactly once per process, so building
several applications (as the test suite does) does not duplicate
handlers.

Every handler carries a ``RedactBearerFilter``.  Access tokens must
never reach log output, even when a third-party library logs raw
request headers.
"""

import logging
import re
from pathlib import Path
from typing import Optional


_BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+")


class RedactBearerFilter(logging.Filter):
    """Replace bearer tokens in formatted log messages with ``***``."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "Bearer" in message:
            record.msg = _BEARER_PATTERN.sub(r"\1***", message)
            record.args = None
        return True


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path to a file to log messages to.  If omitted, no file
        handler is added.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    redact = RedactBearerFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        logger.addHandler(handler)
