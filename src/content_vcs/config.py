"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_db_path() -> Path:
    """Return the database file path from CV_DB_PATH."""
    raw = os.environ.get("CV_DB_PATH", "~/.local/share/content_vcs/versions.db")
    return Path(raw).expanduser()


def get_database_url() -> str | None:
    """Return the database URL from CV_DATABASE_URL, or None for SQLite."""
    return os.environ.get("CV_DATABASE_URL") or None


def get_log_level() -> str:
    """Return the logging level from CV_LOG_LEVEL."""
    return os.environ.get("CV_LOG_LEVEL", "WARNING").upper()


def get_default_author() -> str | None:
    """Return the author recorded on versions created through the tools."""
    return os.environ.get("CV_DEFAULT_AUTHOR") or None
