"""Helpers for building API paths and auth headers in tests."""

from __future__ import annotations

from functools import lru_cache

from tasktracker.config import get_settings
from tasktracker.security import create_access_token


@lru_cache(maxsize=1)
def _api_prefix() -> str:
    """Get the API prefix from settings."""

    return get_settings().api_prefix


def api_path(path: str) -> str:
    """Return the absolute API path.

    Args:
        path: relative path, with or without a leading `/`.

    Returns:
        A string such as `/api/<path>`.
    """

    if not path.startswith("/"):
        path = f"/{path}"
    return f"{_api_prefix()}{path}"


def auth_headers(user_id: int) -> dict[str, str]:
    """Bearer header for the given user."""

    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
