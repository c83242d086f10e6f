"""
Colorful logging configuration using rich.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from bongo.settings.store import StoreSettings

console = Console(stderr=True)


def setup_logging(level: str | None = None) -> None:
    """
    Configure colorful logging with rich.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
               Defaults to DEBUG if BONGO_DEBUG=true in env, else the
               configured BONGO_LOG_LEVEL.
    """
    if level is None:
        debug_mode = os.environ.get("BONGO_DEBUG", "false").lower() == "true"
        level = "DEBUG" if debug_mode else StoreSettings().log_level
    
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                show_path=False,
                markup=False,
            )
        ],
        force=True,
    )
    
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
