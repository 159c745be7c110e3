"""Tests for result classification"""
import pytest

from analytics.errors import BackendError, MalformedResponseError, NoDataError, TransportError
from analytics.results import (
    GENERIC_ERROR_MESSAGE,
    AnalysisResult,
    ChartResult,
    ErrorResult,
    MessageResult,
    ResultClassifier,
    TableResult,
)
from analytics.schemas import QuerySuccessBody


@pytest.fixture
def classifier():
    return ResultClassifier()


class TestClassifySuccess:
    def test_fields_pass_through_unchanged(self, classifier):
        table = [{"region": "North", "sales": 1200}, {"region": "South", "sales": None}]
        chart = {"type": "bar", "data": {"labels": ["North", "South"], "values": [1200, 0]}}
        body = QuerySuccessBody.model_validate({"table": table, "chart": chart, "message": "Two regions"})

        result = classifier.classify_success(body)

        assert result.table == table
        assert result.chart == chart
        assert result.message == "Two regions"
        assert result.kind == "success"

    def test_parts_in_display_order(self, classifier):
        body = QuerySuccessBody.model_validate({"message": "m", "table": [{"a": 1}], "chart": {"k": 1}})

        parts = classifier.classify_success(body).parts()

        assert parts == [ChartResult({"k": 1}), TableResult([{"a": 1}]), MessageResult("m")]

    def test_empty_body_is_valid_empty_result(self, classifier):
        result = classifier.classify_success(QuerySuccessBody.model_validate({}))

        assert isinstance(result, AnalysisResult)
        assert result.is_empty
        assert result.parts() == []

    def test_backend_logs_are_parsed(self, classifier):
        body = QuerySuccessBody.model_validate(
            {"logs": [{"timestamp": "2024-03-01T12:00:00Z", "message": "step", "severity": "error"}]}
        )

        result = classifier.classify_success(body)

        assert len(result.logs) == 1
        assert result.logs[0].message == "step"
        assert result.logs[0].is_error
        assert result.logs[0].timestamp.year == 2024


class TestClassifyFailure:
    def test_error_field_wins_over_message(self, classifier):
        exc = BackendError(status_code=400, body={"error": "bad column", "message": "request failed"})

        result = classifier.classify_failure(exc)

        assert isinstance(result, ErrorResult)
        assert result.message == "bad column"

    def test_message_used_when_error_missing(self, classifier):
        exc = BackendError(status_code=400, body={"message": "request failed"})

        assert classifier.classify_failure(exc).message == "request failed"

    def test_generic_fallback_mentions_status(self, classifier):
        result = classifier.classify_failure(BackendError(status_code=502, body={}))

        assert result.message.startswith(GENERIC_ERROR_MESSAGE)
        assert "502" in result.message

    def test_details_and_suggestion_blocks(self, classifier):
        exc = BackendError(
            status_code=500,
            body={"error": "parse failed", "details": {"column": "sales", "suggestion": "check column names"}},
        )

        result = classifier.classify_failure(exc)

        assert result.message.startswith("parse failed\n\nDetails:\n")
        assert '"column": "sales"' in result.message
        assert result.message.endswith("\n\nSuggestion: check column names")
        assert result.details == {"column": "sales", "suggestion": "check column names"}

    def test_non_dict_details_have_no_suggestion(self, classifier):
        exc = BackendError(status_code=500, body={"error": "oops", "details": ["first", "second"]})

        result = classifier.classify_failure(exc)

        assert "Details:" in result.message
        assert "Suggestion" not in result.message

    def test_backend_stack_becomes_raw_trace(self, classifier):
        exc = BackendError(status_code=500, body={"error": "oops", "stack": "Error: oops\n    at handler"})

        assert classifier.classify_failure(exc).raw_trace == "Error: oops\n    at handler"

    def test_transport_message_and_trace(self, classifier):
        try:
            raise TransportError("connection reset")
        except TransportError as exc:
            result = classifier.classify_failure(exc)

        assert result.message == "connection reset"
        assert result.error_type == "TransportError"
        assert "connection reset" in result.raw_trace

    def test_malformed_response_is_transport_kind(self, classifier):
        result = classifier.classify_failure(MalformedResponseError("not json"))

        assert result.message == "not json"
        assert result.error_type == "MalformedResponseError"
        assert result.raw_trace is None

    def test_blank_transport_message_falls_back(self, classifier):
        assert classifier.classify_failure(RuntimeError("")).message == GENERIC_ERROR_MESSAGE


def test_local_no_data(classifier):
    result = classifier.classify_local(NoDataError())

    assert result.message == "no data available"
    assert result.error_type == "NoDataError"
    assert result.kind == "error"
