"""Configuration loading for the journal engine.

Loads settings from .env file and environment variables with sensible defaults.
Validates configuration and provides clear error messages.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from rentledger.services.logging import LOG_LEVEL_MAP


@dataclass
class JournalConfig:
    """Configuration for journal generation runs."""

    database_url: str = "sqlite:///./rentledger.db"
    """SQLAlchemy database URL (default: local SQLite)"""

    log_file: str = "logs/journal.log"
    """Path to log file (default: logs/journal.log)"""

    log_level: str = "INFO"
    """Logging level name (default: INFO)"""


def load_config(env_file: str = ".env") -> JournalConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_FILE, LOG_LEVEL)
    2. .env file in project root
    3. Default values

    Args:
        env_file: Path to the dotenv file (default: .env)

    Returns:
        JournalConfig with all settings

    Raises:
        ValueError: If a configured value is invalid
    """
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    database_url = os.getenv("DATABASE_URL", "sqlite:///./rentledger.db").strip()
    log_file = os.getenv("LOG_FILE", "logs/journal.log").strip()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    if not database_url:
        raise ValueError(
            "DATABASE_URL is empty. "
            "Set DATABASE_URL environment variable or in .env file"
        )
    if "://" not in database_url:
        raise ValueError(
            f"DATABASE_URL is not a valid SQLAlchemy URL: {database_url}. "
            f"Expected e.g. sqlite:///./rentledger.db"
        )
    if not log_file:
        raise ValueError("LOG_FILE is empty. Set LOG_FILE or remove it to use the default")
    if log_level not in LOG_LEVEL_MAP:
        raise ValueError(
            f"LOG_LEVEL must be one of {', '.join(LOG_LEVEL_MAP)}. Found: {log_level}"
        )

    return JournalConfig(
        database_url=database_url,
        log_file=log_file,
        log_level=log_level,
    )
