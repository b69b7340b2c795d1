from __future__ import annotations

import logging
import sys

from ats_tracking.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_LOG_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Send ``ats_tracking`` records to stderr; stdout carries the CLI's JSON.

    At DEBUG the SQLAlchemy engine logger is attached too, so statements are echoed.
    """
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    resolved = getattr(logging, (level or get_settings().log_level).upper(), logging.WARNING)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("ats_tracking")
    package_logger.setLevel(resolved)
    package_logger.addHandler(handler)
    if resolved <= logging.DEBUG:
        engine_logger = logging.getLogger("sqlalchemy.engine")
        engine_logger.setLevel(logging.INFO)
        engine_logger.addHandler(handler)
    _LOG_CONFIGURED = True
