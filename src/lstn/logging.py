"""Logging configuration for lstn CLI."""

import logging
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_level(loglevel: str) -> int:
    """Map a --loglevel value to a logging level, defaulting to INFO."""
    return LOG_LEVELS.get(loglevel.strip().lower(), logging.INFO)


def configure_logging(
    loglevel: str = "info",
    no_color: bool = False,
    stream: TextIO | None = None,
) -> Console:
    """Configure logging based on the resolved --loglevel option.

    Args:
        loglevel: Name of the level (debug, info, warn, error, fatal, panic)
        no_color: Disable colored output
        stream: Output stream for logs (stderr when omitted)

    Returns:
        Configured Rich console for diagnostics
    """
    level = parse_level(loglevel)

    console = Console(
        file=stream,
        stderr=stream is None,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=level <= logging.DEBUG,
        show_path=level <= logging.DEBUG,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
