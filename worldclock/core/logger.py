import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from worldclock.core.constants import LOG_FILE, LOG_LEVEL

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logger(console: bool = False, log_file: Optional[Path] = None, level: str = LOG_LEVEL):
    """
    Configure loguru sinks for the process.

    The curses UI owns the terminal, so it runs with the file sink only.
    Plain CLI commands also log INFO and above to stderr.
    """
    logger.remove()  # Remove default handler

    # Add stderr handler only if available and requested
    if console and sys.stderr:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level="INFO")

    # Add file handler
    path = log_file or LOG_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            rotation="1 MB",
            retention="10 days",
            format=FILE_FORMAT,
            level=level,
        )
    except OSError as e:
        # Log file is optional; keep running without it
        if console:
            logger.warning(f"Cannot write log file {path}: {e}")
    return logger
