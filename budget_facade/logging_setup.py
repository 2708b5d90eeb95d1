"""Logging for budget_facade.

Every module logs through ``get_logger(__name__)`` and never installs a
handler. Until an entrypoint calls :func:`configure_logging` the package
logger carries a ``NullHandler``, so embedding the facade in another
application prints nothing unless that application configures logging.

The CLI calls :func:`configure_logging` once from its root callback. The
level comes from the argument, then ``BUDGET_FACADE_LOG_LEVEL``, then INFO.
``httpx`` and ``httpcore`` log each request at INFO; they are held at WARNING
unless the package itself runs at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "budget_facade"
_LEVEL_ENV_VAR = "BUDGET_FACADE_LOG_LEVEL"
_TRANSPORT_LOGGERS = ("httpx", "httpcore")
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _coerce_level(level: int | str | None) -> int | None:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelNamesMapping().get(name)
        if numeric is not None:
            return numeric
    return None


def _parse_level(level: int | str | None) -> int:
    for candidate in (level, os.getenv(_LEVEL_ENV_VAR)):
        resolved = _coerce_level(candidate)
        if resolved is not None:
            return resolved
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send ``budget_facade`` records to ``stream``; later calls are no-ops.

    ``level`` is an ``int`` or a level name such as ``"debug"``. ``fmt``
    replaces the default ``asctime name levelname message`` layout.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    pkg_logger.handlers = [h for h in pkg_logger.handlers if not isinstance(h, logging.NullHandler)]

    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    # Records stop here; the host's root logger does not see them twice.
    pkg_logger.propagate = False

    if resolved > logging.DEBUG:
        for name in _TRANSPORT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
