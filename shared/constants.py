from __future__ import annotations

import os
from pathlib import Path

BACKEND_BASE_URL = "http://127.0.0.1:3000"
QUERY_PATH = "/api/query"


def get_localappdata() -> Path:
    """Return LOCALAPPDATA path; fallback to user home-based AppData/Local."""
    env_path = os.getenv("LOCALAPPDATA")
    if env_path:
        return Path(env_path)
    return Path.home() / "AppData" / "Local"


def analytics_home() -> Path:
    """%LOCALAPPDATA%\\NlpAnalytics\\"""
    return get_localappdata() / "NlpAnalytics"


def ensure_dirs() -> None:
    """Create required runtime directories."""
    root = analytics_home()
    for rel in ("config", "session", "logs"):
        (root / rel).mkdir(parents=True, exist_ok=True)
