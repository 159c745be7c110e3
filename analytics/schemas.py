from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _text_or_none(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class QueryRequest(BaseModel):
    query: str
    data: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)


class BackendLogEntry(BaseModel):
    """One narration line; timestamps stay raw and are parsed by LogEntry.from_wire."""

    model_config = ConfigDict(extra="ignore")

    timestamp: Any = None
    message: str = ""
    severity: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, value: Any) -> str:
        return _text_or_none(value) or ""

    @field_validator("severity", mode="before")
    @classmethod
    def coerce_severity(cls, value: Any) -> str | None:
        return _text_or_none(value)


class QuerySuccessBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    table: list[dict[str, Any]] | None = None
    chart: Any = None
    message: str | None = None
    logs: list[BackendLogEntry] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, value: Any) -> str | None:
        return _text_or_none(value)

    @field_validator("logs", mode="before")
    @classmethod
    def drop_unusable_logs(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, dict)]
        return value


class QueryErrorBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    error: str | None = None
    message: str | None = None
    details: Any = None
    stack: str | None = None
