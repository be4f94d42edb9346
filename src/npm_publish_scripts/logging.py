"""Shared Rich logging utilities."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "npm_publish_scripts"

_console: Optional[Console] = None


def rich_console() -> Console:
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Install a single Rich handler on the package logger.

    Calling this again only updates the level, so repeated CLI invocations in
    one process (tests) don't stack handlers.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=rich_console(),
            show_time=False,
            show_path=verbose,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


def print_banner(message: str, style: str = "bold cyan") -> None:
    """Print a step heading to the operator."""
    rich_console().print(f"\n[{style}]{message}[/{style}]")
