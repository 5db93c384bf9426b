"""Logging setup for RPS Duel."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route the root logger through rich.

    Replaces any handlers already installed so repeated calls (tests,
    reloads) don't duplicate output.
    """
    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_path=False,
        log_time_format="[%X]",
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[handler],
        force=True,
    )
