"""Tests for configuration loading"""
import json

import pytest

from analytics.config import DEFAULT_TIMEOUT_SECONDS, load_config
from shared.constants import BACKEND_BASE_URL, QUERY_PATH


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "ANALYTICS_BACKEND_URL",
        "ANALYTICS_QUERY_PATH",
        "ANALYTICS_TIMEOUT_SECONDS",
        "ANALYTICS_LOG_LEVEL",
        "ANALYTICS_WEBVIEW_DEBUG",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "missing.json")

    assert config.base_url == BACKEND_BASE_URL
    assert config.query_path == QUERY_PATH
    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert config.log_level == "INFO"
    assert config.webview_debug is False


def test_file_values_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "analytics.json"
    path.write_text(
        json.dumps({"base_url": "http://file.test/", "query_path": "api/ask", "timeout_seconds": 30}),
        encoding="utf-8",
    )
    monkeypatch.setenv("ANALYTICS_TIMEOUT_SECONDS", "45")
    monkeypatch.setenv("ANALYTICS_LOG_LEVEL", "debug")

    config = load_config(path)

    assert config.base_url == "http://file.test"
    assert config.query_path == "/api/ask"
    assert config.timeout_seconds == 45.0
    assert config.log_level == "DEBUG"


def test_bad_values_fall_back(tmp_path, monkeypatch):
    path = tmp_path / "analytics.json"
    path.write_text(json.dumps({"timeout_seconds": "soon", "connect_timeout_seconds": 0}), encoding="utf-8")
    monkeypatch.setenv("ANALYTICS_LOG_LEVEL", "chatty")

    config = load_config(path)

    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert config.connect_timeout_seconds == 1.0
    assert config.log_level == "INFO"


def test_corrupt_file_uses_defaults(tmp_path):
    path = tmp_path / "analytics.json"
    path.write_text("not json", encoding="utf-8")

    assert load_config(path).base_url == BACKEND_BASE_URL
