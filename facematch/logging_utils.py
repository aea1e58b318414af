"""Logging setup shared by the facematch CLI and the bin/ scripts."""

from __future__ import annotations

import logging
import os
from typing import Final, Iterable

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"
AWS_LOGGERS: Final[tuple] = ("boto3", "botocore", "urllib3", "s3transfer")


def _coerce_level(env_level: str | None, default: int) -> int:
    """Map a LOG_LEVEL name such as ``debug`` to its logging constant."""

    if not env_level:
        return default
    level = logging.getLevelName(env_level.strip().upper())
    return level if isinstance(level, int) else default


def _quiet(loggers: Iterable[str], level: int) -> None:
    # SDK request/response chatter only shows up at DEBUG.
    target = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in loggers:
        logging.getLogger(name).setLevel(target)


def configure_logging(verbosity: int = 0) -> int:
    """Configure root logging and return the effective level.

    ``verbosity`` 0/1/2+ selects WARNING/INFO/DEBUG; a ``LOG_LEVEL``
    environment variable wins over it.
    """

    if verbosity >= 2:
        default = logging.DEBUG
    elif verbosity == 1:
        default = logging.INFO
    else:
        default = logging.WARNING
    level = _coerce_level(os.getenv("LOG_LEVEL"), default)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, force=True)
    _quiet(AWS_LOGGERS, level)
    return level


__all__ = ["configure_logging"]
