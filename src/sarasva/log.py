"""Logging setup for the terminal app."""
import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    logger = logging.getLogger("sarasva")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))
    return logger
