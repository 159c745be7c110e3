from __future__ import annotations

from typing import Any


class AnalyticsError(RuntimeError):
    pass


class EmptyQueryError(AnalyticsError):
    def __init__(self) -> None:
        super().__init__("empty query")


class NoDataError(AnalyticsError):
    def __init__(self, message: str = "no data available") -> None:
        super().__init__(message)
        self.message = message


class UploadError(AnalyticsError):
    pass


class TransportError(AnalyticsError):
    """The request never produced a usable backend answer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportTimeoutError(TransportError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Backend did not respond within {timeout_seconds:g} seconds")
        self.timeout_seconds = timeout_seconds


class RequestCancelledError(TransportError):
    def __init__(self) -> None:
        super().__init__("Request was cancelled")


class MalformedResponseError(TransportError):
    pass


class BackendError(AnalyticsError):
    """Non-success HTTP status; `body` is the parsed error JSON or empty."""

    def __init__(self, *, status_code: int, body: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.body = body or {}
        super().__init__(self.error or self.message or f"HTTP {status_code}")

    def _text(self, key: str) -> str | None:
        value = self.body.get(key)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def error(self) -> str | None:
        return self._text("error")

    @property
    def message(self) -> str | None:
        return self._text("message")

    @property
    def details(self) -> Any:
        details = self.body.get("details")
        return details if details not in (None, "", {}, []) else None

    @property
    def stack(self) -> str | None:
        return self._text("stack")
