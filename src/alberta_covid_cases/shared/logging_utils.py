"""Logging utilities for the Alberta COVID-19 case engine."""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}"


def setup_logging(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    rotation: str = "1 day",
    retention: Optional[str] = "14 days",
) -> List[int]:
    """Replace loguru's default sink with the engine's console and file sinks.

    Args:
        log_file: Optional path to a rotating log file
        level: Minimum level for both sinks
        rotation: When the log file rotates
        retention: How long rotated files are kept

    Returns:
        Handler ids, so callers can ``logger.remove`` them again

    Raises:
        ValueError: If ``level`` is not a known loguru level. Existing sinks
            are left in place.
    """
    logger.level(level)
    logger.remove()

    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # The file sink records the thread name; concurrent first loads are
        # visible there
        handler_ids.append(
            logger.add(
                log_file,
                format=FILE_FORMAT,
                level=level,
                rotation=rotation,
                retention=retention,
            )
        )
    return handler_ids
