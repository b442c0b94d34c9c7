"""Logging configuration for the CLI."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def setup_logging(verbosity: int = 0, level_name: Optional[str] = None) -> None:
    """Setup logging configuration.

    Args:
        verbosity: Verbosity level (0-3)
        level_name: Level used when no ``-v`` flag is given, e.g. from LOG_LEVEL
    """
    log_level = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
        3: logging.DEBUG,
    }.get(verbosity, logging.DEBUG)
    if verbosity == 0 and level_name:
        log_level = logging.getLevelName(level_name.upper())
        if not isinstance(log_level, int):
            log_level = logging.WARNING

    # Remove all existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(log_level)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity > 2,
    )
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root_logger.addHandler(console_handler)

    logging.getLogger("api_spec_search").setLevel(log_level)

    # Suppress some noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging configured (level: {logging.getLevelName(log_level)})"
    )
