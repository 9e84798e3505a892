from __future__ import annotations

import logging
from typing import Optional

from .config import LoggingSettings

_ROOT = "rowgraph"


def getLogger(name: Optional[str] = None) -> logging.Logger:
    """Package logger; ``name`` is normally the calling module's ``__name__``."""
    return logging.getLogger(name or _ROOT)


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """
    Apply level and format from settings to the package root logger.

    Idempotent: a handler installed by a previous call is reused.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(settings.level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "_rowgraph", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._rowgraph = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(settings.format))
    return logger


__all__ = ["getLogger", "configure_logging"]
