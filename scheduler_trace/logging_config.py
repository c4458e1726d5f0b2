"""
Logging setup for the scheduler-trace command line.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are installed here, by the CLI, and never at import time.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_FORMAT = "%(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "[%X]"


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """
    Configure root logging: DEBUG when verbose, WARNING otherwise.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=level,
        format=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
        handlers=[handler],
        force=True,
    )
