"""Tests for the desktop bridge"""
import pandas as pd
import pytest
from conftest import FakeClient

from analytics.app import AnalyticsApi
from analytics.config import AnalyticsConfig
from analytics.errors import BackendError
from analytics.session_storage import SessionStorage


@pytest.fixture
def make_api():
    created = []

    def _make(*answers, demo_records=None):
        api = AnalyticsApi(
            config=AnalyticsConfig(),
            storage=SessionStorage(),
            client=FakeClient(*answers),
            demo_records=demo_records,
        )
        created.append(api)
        return api

    yield _make
    for api in created:
        api.close()


def test_initial_state_is_demo_mode(make_api):
    state = make_api().get_initial_state()

    assert state["demo_mode"] is True
    assert state["dataset"]["rows"] == 12
    assert state["loading"] is False
    assert state["result"] is None
    assert state["logs"] == []


def test_submit_query_returns_rendered_result(make_api):
    state = make_api({"message": "Average: 42"}).submit_query("average sales")

    assert state["result"]["message"] == "Average: 42"
    assert "Average: 42" in state["result_html"]
    assert state["loading"] is False
    assert len(state["logs"]) == 1


def test_error_state_exposes_trace(make_api):
    failure = BackendError(status_code=500, body={"error": "parse failed", "stack": "Error: parse failed"})

    state = make_api(failure).submit_query("average sales")

    assert state["result"]["type"] == "error"
    assert state["result"]["error_details"] == "Error: parse failed"
    assert "log-error" in state["logs_html"]


def test_blank_submission_changes_nothing(make_api):
    api = make_api()
    before = api.get_state()

    after = api.submit_query("   ")

    assert after["result"] is None
    assert after["logs"] == before["logs"]


def test_load_file_leaves_demo_mode(make_api, tmp_path):
    path = tmp_path / "data.csv"
    pd.DataFrame({"a": [1, 2, 3]}).to_csv(path, index=False)
    api = make_api()

    state = api.load_file(str(path))

    assert state["demo_mode"] is False
    assert state["dataset"]["rows"] == 3
    assert state["upload_error"] == ""


def test_load_file_failure_is_reported(make_api, tmp_path):
    state = make_api().load_file(str(tmp_path / "missing.csv"))

    assert "File not found" in state["upload_error"]
    assert state["demo_mode"] is True
