"""
Logging setup for the portfolio API.
Every module logs through the standard library with one shared line format; chatty client
libraries are held at WARNING unless the service itself runs at DEBUG.
"""

from __future__ import annotations

import logging

from portfolio.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "multipart", "sqlalchemy.engine")

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once per process; `level` overrides LOG_LEVEL."""

    global _configured
    if _configured:
        return

    level_name = (level or get_settings().LOG_LEVEL).upper()
    root_level = logging.getLevelName(level_name)
    if not isinstance(root_level, int):
        root_level = logging.INFO

    logging.basicConfig(level=root_level, format=LOG_FORMAT)
    if root_level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True
