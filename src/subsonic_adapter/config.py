# subsonic_adapter/config.py

"""Shared configuration and environment setup."""

from __future__ import annotations

from os import getenv
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

API_VERSION = "1.9.0"
RESPONSE_FORMAT = "json"
DEFAULT_CLIENT_NAME = "web"
SESSION_FILE_NAME = ".subsonic-session.json"


def get_project_root() -> Path:
    """Return the project root directory.

    Prefers SUBSONIC_PROJECT_ROOT env var. Falls back to current working directory.
    """
    if root := getenv("SUBSONIC_PROJECT_ROOT"):
        return Path(root).resolve()
    return Path.cwd()


def get_server_url() -> str | None:
    """Return the pinned server URL, or None when the user may choose one."""
    return getenv("SUBSONIC_SERVER_URL") or None


def get_client_name() -> str:
    return getenv("SUBSONIC_CLIENT_NAME") or DEFAULT_CLIENT_NAME


def get_session_file() -> Path:
    """Return the path of the durable session file."""
    if path := getenv("SUBSONIC_SESSION_FILE"):
        return Path(path)
    return get_project_root() / SESSION_FILE_NAME
