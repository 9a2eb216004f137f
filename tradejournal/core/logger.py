"""Logging utility using loguru."""
import sys
from pathlib import Path

from loguru import logger


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} | {message}"

_configured = False


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Install the console (and optional rotating file) handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file

    Calling it again replaces the previous handlers, so the CLI can raise the
    level after the modules have already been imported.
    """
    global _configured

    # Remove default handler
    logger.remove()
    logger.configure(extra={"name": "tradejournal"})

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",  # Rotate when file reaches 10 MB
            retention="7 days",  # Keep logs for 7 days
            compression="zip"  # Compress rotated logs
        )

    _configured = True


def get_logger(name: str = "tradejournal"):
    """
    Get a loguru logger bound to a module name.

    Args:
        name: Logger name (used as context)

    Returns:
        Configured loguru logger

    Usage:
        logger = get_logger(__name__)
        logger.info("Computing metrics...")
        logger.debug(f"Dropped {n} malformed trades")
    """
    if not _configured:
        configure_logging()

    return logger.bind(name=name)
