"""
Configuration management for streakly.

Loads settings from environment variables (and a .env file if present).
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

LOG_LEVEL = os.getenv("STREAKLY_LOG_LEVEL", "WARNING").upper()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_db_path() -> Path:
    """Get the database path, honouring STREAKLY_DB_PATH."""
    env_path = os.environ.get("STREAKLY_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".streakly" / "tasks.db"


def validate_config():
    """Validate that configuration values are usable."""
    problems = []

    if LOG_LEVEL not in VALID_LOG_LEVELS:
        problems.append(
            f"STREAKLY_LOG_LEVEL={LOG_LEVEL!r} (expected one of {', '.join(VALID_LOG_LEVELS)})"
        )

    db_path = get_db_path()
    if db_path.is_dir():
        problems.append(f"STREAKLY_DB_PATH={str(db_path)!r} is a directory")

    if problems:
        raise ValueError(
            f"Invalid configuration: {'; '.join(problems)}\n"
            "Please check your environment or .env file."
        )


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the root logger."""
    level = (level or LOG_LEVEL).upper()
    if level not in VALID_LOG_LEVELS:
        level = "WARNING"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
