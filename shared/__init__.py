"""Shared package for common constants and runtime paths."""

from .constants import (
    BACKEND_BASE_URL,
    QUERY_PATH,
    analytics_home,
    ensure_dirs,
    get_localappdata,
)

__all__ = [
    "BACKEND_BASE_URL",
    "QUERY_PATH",
    "get_localappdata",
    "analytics_home",
    "ensure_dirs",
]
