"""Logging utilities for the genloop evolution engine."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text


_console = Console(safe_box=True)


class LogLevel(IntEnum):
    """Log verbosity levels."""
    SILENT = 0
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


# Global verbosity setting
_verbosity = LogLevel.NORMAL
_logger: logging.Logger | None = None


def set_verbosity(level: LogLevel | str | int) -> None:
    """Set the global verbosity level."""
    global _verbosity

    if isinstance(level, str):
        level = LogLevel[level.upper()]
    elif isinstance(level, int):
        level = LogLevel(level)

    _verbosity = level

    if _logger:
        if level == LogLevel.SILENT:
            _logger.setLevel(logging.CRITICAL + 1)
        elif level == LogLevel.MINIMAL:
            _logger.setLevel(logging.WARNING)
        elif level == LogLevel.NORMAL:
            _logger.setLevel(logging.INFO)
        else:  # VERBOSE, DEBUG
            _logger.setLevel(logging.DEBUG)


def get_verbosity() -> LogLevel:
    """Get the current verbosity level."""
    return _verbosity


def get_logger(name: str = "genloop") -> logging.Logger:
    """Get a configured logger instance."""
    global _logger

    if _logger is None:
        _logger = logging.getLogger(name)
        _logger.handlers.clear()

        handler = RichHandler(
            console=_console,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        _logger.addHandler(handler)

        set_verbosity(_verbosity)

    return _logger


def log_event(
    event: str,
    level: LogLevel = LogLevel.NORMAL,
    **kwargs: Any,
) -> None:
    """Log an event with optional structured data."""
    if _verbosity < level:
        return

    logger = get_logger()

    if kwargs:
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        message = f"[{event}] {details}"
    else:
        message = f"[{event}]"

    if level <= LogLevel.MINIMAL:
        logger.warning(message)
    elif level == LogLevel.NORMAL:
        logger.info(message)
    else:
        logger.debug(message)


def log_generation(
    gen: int,
    size: int,
    best_fitness: float,
    mean_fitness: float,
    **extra: Any,
) -> None:
    """Log generation progress."""
    log_event(
        f"GEN {gen:03d}",
        level=LogLevel.NORMAL,
        size=size,
        best=f"{best_fitness:.4f}",
        mean=f"{mean_fitness:.4f}",
        **extra,
    )


def print_header(title: str) -> None:
    """Print a rule announcing a run."""
    if _verbosity >= LogLevel.MINIMAL:
        _console.print()
        _console.rule(f"[bold blue]{title}[/bold blue]")


def print_result(candidate: Any, fitness: float, **stats: Any) -> None:
    """Print the fittest candidate of a finished run with its statistics."""
    if _verbosity < LogLevel.MINIMAL:
        return

    table = Table(title="Fittest candidate", title_style="bold green", show_header=False)
    table.add_column("field", style="dim")
    table.add_column("value")
    table.add_row("candidate", Text(repr(candidate)))
    table.add_row("fitness", f"{fitness:.4f}")
    for name, value in stats.items():
        table.add_row(name, Text(str(value)))

    _console.print()
    _console.print(table)
