from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from shared.constants import BACKEND_BASE_URL, QUERY_PATH, analytics_home

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5.0
MIN_TIMEOUT_SECONDS = 1.0
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(slots=True)
class AnalyticsConfig:
    base_url: str = BACKEND_BASE_URL
    query_path: str = QUERY_PATH
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    webview_debug: bool = False


def config_path() -> Path:
    return analytics_home() / "config" / "analytics.json"


def _as_seconds(value: object, default: float) -> float:
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(MIN_TIMEOUT_SECONDS, seconds)


def load_config(path: Path | None = None) -> AnalyticsConfig:
    raw: dict = {}
    cfg_path = path or config_path()
    if cfg_path.exists():
        try:
            loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
            raw = loaded if isinstance(loaded, dict) else {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable config file %s", cfg_path)
            raw = {}

    base_url = str(raw.get("base_url", "")).strip() or BACKEND_BASE_URL
    env_base_url = os.getenv("ANALYTICS_BACKEND_URL", "").strip()
    if env_base_url:
        base_url = env_base_url

    query_path = str(raw.get("query_path", "")).strip() or QUERY_PATH
    env_query_path = os.getenv("ANALYTICS_QUERY_PATH", "").strip()
    if env_query_path:
        query_path = env_query_path
    if not query_path.startswith("/"):
        query_path = f"/{query_path}"

    timeout_seconds = _as_seconds(raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS), DEFAULT_TIMEOUT_SECONDS)
    env_timeout = os.getenv("ANALYTICS_TIMEOUT_SECONDS", "").strip()
    if env_timeout:
        timeout_seconds = _as_seconds(env_timeout, timeout_seconds)

    connect_timeout_seconds = _as_seconds(
        raw.get("connect_timeout_seconds", DEFAULT_CONNECT_TIMEOUT_SECONDS),
        DEFAULT_CONNECT_TIMEOUT_SECONDS,
    )

    log_level = str(raw.get("log_level", "INFO")).strip().upper()
    env_log_level = os.getenv("ANALYTICS_LOG_LEVEL", "").strip().upper()
    if env_log_level:
        log_level = env_log_level
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    webview_debug = bool(raw.get("webview_debug", False))
    env_debug = os.getenv("ANALYTICS_WEBVIEW_DEBUG", "").strip()
    if env_debug:
        webview_debug = env_debug == "1"

    return AnalyticsConfig(
        base_url=base_url.rstrip("/"),
        query_path=query_path,
        timeout_seconds=timeout_seconds,
        connect_timeout_seconds=connect_timeout_seconds,
        log_level=log_level,
        webview_debug=webview_debug,
    )
