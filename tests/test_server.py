"""Tests for server wiring and configuration."""

from pathlib import Path
from unittest.mock import patch

from fastmcp import FastMCP

from content_vcs.config import (
    get_database_url,
    get_db_path,
    get_default_author,
    get_log_level,
)
from content_vcs.server import create_server


def test_create_server():
    """Server should be a FastMCP instance named after the project."""
    server = create_server()
    assert isinstance(server, FastMCP)
    assert server.name == "content-vcs"


def test_config_defaults():
    """Defaults apply when no CV_* variables are set."""
    with patch.dict("os.environ", {}, clear=True):
        assert get_db_path().name == "versions.db"
        assert get_database_url() is None
        assert get_log_level() == "WARNING"
        assert get_default_author() is None


def test_config_from_env():
    """Config should read from environment variables."""
    with patch.dict(
        "os.environ",
        {
            "CV_DB_PATH": "/tmp/cv/test.db",
            "CV_DATABASE_URL": "postgresql://localhost/cv",
            "CV_LOG_LEVEL": "debug",
            "CV_DEFAULT_AUTHOR": "editor",
        },
    ):
        assert get_db_path() == Path("/tmp/cv/test.db")
        assert get_database_url() == "postgresql://localhost/cv"
        assert get_log_level() == "DEBUG"
        assert get_default_author() == "editor"


def test_empty_env_values_are_unset():
    with patch.dict("os.environ", {"CV_DATABASE_URL": "", "CV_DEFAULT_AUTHOR": ""}):
        assert get_database_url() is None
        assert get_default_author() is None
