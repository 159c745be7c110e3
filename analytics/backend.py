from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from shared.constants import BACKEND_BASE_URL, QUERY_PATH

from .config import DEFAULT_CONNECT_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS, AnalyticsConfig
from .errors import BackendError, MalformedResponseError, TransportError, TransportTimeoutError
from .schemas import QueryErrorBody, QueryRequest, QuerySuccessBody

logger = logging.getLogger(__name__)

ERROR_TEXT_MAX_LENGTH = 240


def _clip_text(value: object, limit: int = ERROR_TEXT_MAX_LENGTH) -> str:
    text_value = str(value or "").strip()
    if len(text_value) <= limit:
        return text_value
    return f"{text_value[:limit].rstrip()}…"


def _validation_summary(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "body"
        problems.append(f"{loc}: {err.get('msg', 'invalid')}")
    return _clip_text("; ".join(problems))


class AnalysisClient:
    """HTTP client for the natural-language analysis endpoint."""

    def __init__(
        self,
        base_url: str = BACKEND_BASE_URL,
        query_path: str = QUERY_PATH,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.query_path = query_path
        self.timeout_seconds = timeout_seconds
        self.connect_timeout_seconds = connect_timeout_seconds

    @classmethod
    def from_config(cls, config: AnalyticsConfig) -> "AnalysisClient":
        return cls(
            base_url=config.base_url,
            query_path=config.query_path,
            timeout_seconds=config.timeout_seconds,
            connect_timeout_seconds=config.connect_timeout_seconds,
        )

    @property
    def query_url(self) -> str:
        return f"{self.base_url}{self.query_path}"

    def _error_body(self, response: requests.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            text = _clip_text(response.text)
            logger.warning("Backend error response (HTTP %s) is not JSON: %s", response.status_code, text)
            return {}
        if not isinstance(data, dict):
            return {}
        try:
            return QueryErrorBody.model_validate(data).model_dump(exclude_none=True)
        except ValidationError:
            return data

    def post_query(self, request: QueryRequest) -> QuerySuccessBody:
        logger.info("Sending query: %s", request.query)
        logger.debug("Query payload: %s rows, columns=%s", len(request.data), request.columns)

        try:
            response = requests.post(
                self.query_url,
                json=request.model_dump(),
                headers={"Content-Type": "application/json"},
                timeout=(self.connect_timeout_seconds, self.timeout_seconds),
            )
        except requests.Timeout as exc:
            raise TransportTimeoutError(self.timeout_seconds) from exc
        except requests.RequestException as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        logger.info("Response received, status: %s", response.status_code)

        if not response.ok:
            body = self._error_body(response)
            logger.error("Backend reported failure (HTTP %s): %s", response.status_code, body)
            raise BackendError(status_code=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Backend returned a response that is not valid JSON") from exc

        if not isinstance(data, dict):
            raise MalformedResponseError("Backend returned a JSON value that is not an object")

        try:
            return QuerySuccessBody.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Backend response has an unexpected shape: {_validation_summary(exc)}"
            ) from exc
