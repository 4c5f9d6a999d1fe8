"""Logging configuration for the journal engine and its CLI.

Provides dual output (stdout + file) with configurable level via LOG_LEVEL env var.
Default: INFO. Set LOG_LEVEL=WARNING for production, DEBUG for verbose output.
"""

import logging
import os
import sys
from pathlib import Path

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Get logging level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_logging(log_file: str = "logs/journal.log", level: str | None = None) -> logging.Logger:
    """
    Configure root logger for journal generation runs.

    Args:
        log_file: Path to log file (default: logs/journal.log)
        level: Level name overriding LOG_LEVEL (optional)

    Returns:
        The "rentledger" logger

    Behavior:
        - Sets up all loggers to output to both stdout and file
        - ISO format timestamps for consistency
        - Warnings about skipped assessments land in the file as an audit trail
    """
    # Create logs directory if it doesn't exist
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # ISO format: [YYYY-MM-DD HH:MM:SS]
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = LOG_LEVEL_MAP.get(level.upper(), logging.INFO) if level else get_log_level()

    # SQL statement echo is only wanted at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if log_level <= logging.DEBUG else logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # Handler 1: stdout (console)
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    # Handler 2: file (logs/journal.log)
    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    return logging.getLogger("rentledger")
