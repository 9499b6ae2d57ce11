"""Utility modules for the genloop evolution engine."""

from genloop.utils.logging import get_logger, set_verbosity, get_verbosity, LogLevel, log_event

__all__ = [
    "get_logger",
    "set_verbosity",
    "get_verbosity",
    "LogLevel",
    "log_event",
]
