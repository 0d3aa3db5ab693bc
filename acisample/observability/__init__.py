"""Logging for acisample."""

from .logger import logger
from .logging import LogConfig, LogLevel, setup_logging, teardown_logging

__all__ = [
    "LogConfig",
    "LogLevel",
    "logger",
    "setup_logging",
    "teardown_logging",
]
