"""Logging setup shared by all tools."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_FORMAT = "%(message)s"


def setup_logger(name: Optional[str] = None, level: str = "INFO") -> logging.Logger:
    """
    Configure logging with a rich handler.

    Args:
        name: Logger name (root logger when None)
        level: Log level name (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger
    """
    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt="[%X]"))
        root.addHandler(handler)

    root.setLevel(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level.upper())
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
