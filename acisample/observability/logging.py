"""Logging configuration for acisample.

Logging is silent by default (library behavior). The CLI calls
:func:`setup_logging` with a :class:`LogConfig` built from its flags;
library users may do the same around their own calls.

Example:
    from acisample.observability import LogConfig, setup_logging, teardown_logging

    handlers = setup_logging(LogConfig(level="DEBUG", console=True))
    try:
        ...
    finally:
        teardown_logging(handlers)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

from .logger import ROOT, logger

LogLevel: TypeAlias = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum level for the console handler.
        file: Path to a log file, or None to skip file output. The file
            always receives DEBUG and above.
        console: Whether to log to stderr through rich.
    """

    level: LogLevel = "INFO"
    file: str | None = None
    console: bool = True


def setup_logging(config: LogConfig) -> list[int]:
    """Install handlers for ``config`` and return their ids for cleanup."""
    logger.remove()
    logger.enable(ROOT)
    handler_ids: list[int] = []

    if config.console:
        handler_ids.append(logger.add(sys.stderr, level=config.level))

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(logger.add(config.file, level="DEBUG"))

    return handler_ids


def teardown_logging(handler_ids: list[int]) -> None:
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable(ROOT)
