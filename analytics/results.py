"""Typed query outcomes and the classifier that builds them from backend answers."""

from __future__ import annotations

import json
import traceback
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from .activity_log import LogEntry
from .errors import BackendError, NoDataError, TransportError
from .schemas import QuerySuccessBody

GENERIC_ERROR_MESSAGE = "Request processing failed"


@dataclass(frozen=True, slots=True)
class TableResult:
    rows: list[dict[str, Any]]


@dataclass(frozen=True, slots=True)
class ChartResult:
    chart_spec: Any


@dataclass(frozen=True, slots=True)
class MessageResult:
    text: str


ResultPart = Union[TableResult, ChartResult, MessageResult]


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    table: list[dict[str, Any]] | None = None
    chart: Any = None
    message: str | None = None
    logs: tuple[LogEntry, ...] = ()
    kind: Literal["success"] = field(default="success", init=False)

    def parts(self) -> list[ResultPart]:
        parts: list[ResultPart] = []
        if self.chart is not None:
            parts.append(ChartResult(self.chart))
        if self.table is not None:
            parts.append(TableResult(self.table))
        if self.message is not None:
            parts.append(MessageResult(self.message))
        return parts

    @property
    def is_empty(self) -> bool:
        return not self.parts()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "table": self.table,
            "chart": self.chart,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class ErrorResult:
    message: str
    details: Any = None
    raw_trace: str | None = None
    error_type: str = "TransportError"
    kind: Literal["error"] = field(default="error", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "message": self.message,
            "details": self.details,
            "error_details": self.raw_trace,
            "error_type": self.error_type,
        }


Result = Union[AnalysisResult, ErrorResult]


def _format_details(details: Any) -> str:
    try:
        return json.dumps(details, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(details)


def _format_trace(exc: BaseException) -> str | None:
    if exc.__traceback__ is None and exc.__cause__ is None:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class ResultClassifier:
    def classify_success(self, body: QuerySuccessBody) -> AnalysisResult:
        return AnalysisResult(
            table=body.table,
            chart=body.chart,
            message=body.message,
            logs=tuple(LogEntry.from_wire(e.model_dump()) for e in body.logs),
        )

    def classify_local(self, exc: NoDataError) -> ErrorResult:
        return ErrorResult(message=exc.message, error_type=type(exc).__name__)

    def classify_failure(self, exc: BaseException) -> ErrorResult:
        details: Any = None
        raw_trace: str | None = None

        if isinstance(exc, BackendError):
            message = exc.error or exc.message or f"{GENERIC_ERROR_MESSAGE} (HTTP {exc.status_code})"
            details = exc.details
            raw_trace = exc.stack or _format_trace(exc)
        else:
            transport_message = exc.message if isinstance(exc, TransportError) else str(exc)
            message = (transport_message or "").strip() or GENERIC_ERROR_MESSAGE
            raw_trace = _format_trace(exc)

        if details is not None:
            message += f"\n\nDetails:\n{_format_details(details)}"
            if isinstance(details, dict) and details.get("suggestion"):
                message += f"\n\nSuggestion: {details['suggestion']}"

        return ErrorResult(
            message=message,
            details=details,
            raw_trace=raw_trace,
            error_type=type(exc).__name__,
        )
