"""
Logging configuration for the catalog crawler.

Every module logs through a child of the ``catalog_crawler`` logger
(``catalog_crawler.retry``, ``catalog_crawler.checkpoint``, ...), so one
call to setup_logging routes the whole run to the console and to a log file
kept next to the checkpoints.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


# Default logger name
LOGGER_NAME = "catalog_crawler"

LOG_FILE_NAME = "crawler.log"

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-26s | %(message)s'

# Cached root crawler logger
_logger: Optional[logging.Logger] = None


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the crawler logger, or the child logger for one component.

    Args:
        component: Short component name, e.g. "retry" -> catalog_crawler.retry
    """
    global _logger
    if _logger is None:
        _logger = logging.getLogger(LOGGER_NAME)
    if component is None:
        return _logger
    return _logger.getChild(component)


def setup_logging(
    output_dir: Path,
    verbose: bool = False,
    log_file_name: str = LOG_FILE_NAME,
) -> logging.Logger:
    """
    Configure logging with console and file handlers.

    Calling it again (e.g. for a second site in the same process) replaces
    the previous handlers and closes the old log file.

    Args:
        output_dir: Directory where the log file will be created
        verbose: If True, set console log level to DEBUG
        log_file_name: Name of the log file inside output_dir

    Returns:
        Configured logger instance
    """
    logger = get_logger()
    log_level = logging.DEBUG if verbose else logging.INFO

    # Create formatter with timestamp
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    # File handler, alongside the site's checkpoints
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = output_dir / log_file_name
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)  # Always log debug to file
    file_handler.setFormatter(formatter)

    # Configure logger
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):  # Remove existing handlers
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Log file: {log_file}")

    return logger
