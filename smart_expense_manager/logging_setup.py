"""Centralized logging configuration for ``smart_expense_manager``.

Library modules only call ``get_logger(__name__)``. The Streamlit entrypoint
calls ``configure_logging()`` once at startup; until then the package logger
carries a ``NullHandler`` and stays silent.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from smart_expense_manager import config

_PKG_LOGGER_NAME = "smart_expense_manager"
_CONFIGURED = False


def _level_from_name(name: str) -> int | None:
    name = name.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    """Explicit level, then ``SEM_LOG_LEVEL``, then ``INFO``; unknown names fall through."""
    if isinstance(level, int):
        return level
    for candidate in (level, config.LOG_LEVEL):
        if isinstance(candidate, str):
            parsed = _level_from_name(candidate)
            if parsed is not None:
                return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach a single ``StreamHandler`` to the package logger.

    ``level`` falls back to ``SEM_LOG_LEVEL`` and then ``INFO``. Repeated
    calls are no-ops, which matters because Streamlit re-executes the page
    script on every interaction.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(_parse_level(level))
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
