"""Logging setup for the command line and the web app."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> None:
    """Attach a rich handler to the ``libregistry`` logger at ``level``."""
    logger = logging.getLogger("libregistry")
    logger.setLevel(level if isinstance(level, int) else level.upper())
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(
        RichHandler(console=console or Console(stderr=True), show_path=False)
    )
    logger.propagate = False
