"""Logging setup for the command-line interface.

Library modules only create module-level loggers; handlers are installed
here, once, by the CLI.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route autorelease logging through a rich handler on stderr.

    Debug output is enabled by ``verbose`` or by ``DEBUG=true`` in the
    environment.
    """
    debug = verbose or os.environ.get("DEBUG", "").lower() == "true"

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger("autorelease")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False
