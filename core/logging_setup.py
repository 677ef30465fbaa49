"""Package logger wiring for Cadence.

Modules obtain loggers through :func:`get_logger` and leave handlers alone.
An embedding application calls :func:`configure_logging` to send the
``cadence`` hierarchy to a stream; without it nothing is emitted.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from config.settings import get_settings

__all__ = ["PACKAGE_LOGGER", "DEFAULT_FORMAT", "resolve_level", "configure_logging", "get_logger"]

PACKAGE_LOGGER = "cadence"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class _CadenceHandler(logging.StreamHandler):
    """Stream handler installed by :func:`configure_logging`."""


def resolve_level(level: int | str | None = None) -> int:
    """Return a numeric logging level, defaulting to ``Settings.log_level``.

    Unknown level names resolve to ``logging.INFO``.
    """

    if level is None:
        level = get_settings().log_level
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a stream handler to the ``cadence`` logger and return it.

    Parameters
    ----------
    level:
        Level as ``int`` or name; ``None`` reads ``CADENCE_LOG_LEVEL``
        through the settings.
    fmt:
        Format string, :data:`DEFAULT_FORMAT` when omitted.
    stream:
        Destination, ``sys.stderr`` when omitted.

    Calling it again once a handler is installed leaves the logger as is.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if any(isinstance(handler, _CadenceHandler) for handler in logger.handlers):
        return logger

    logger.handlers = [handler for handler in logger.handlers if not isinstance(handler, logging.NullHandler)]

    handler = _CadenceHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
