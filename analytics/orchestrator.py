from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

from .activity_log import ActivityLog, LogEntry
from .backend import AnalysisClient
from .datasets import DatasetStore
from .errors import (
    EmptyQueryError,
    NoDataError,
    RequestCancelledError,
    TransportTimeoutError,
)
from .results import AnalysisResult, ErrorResult, Result, ResultClassifier
from .schemas import QueryRequest, QuerySuccessBody

logger = logging.getLogger(__name__)

CANCEL_POLL_SECONDS = 0.05
TRACE_PREVIEW_LENGTH = 500
DISPATCH_WORKERS = 4

START_MESSAGE = "Started processing query..."
NO_DATA_MESSAGE = "ERROR: no data available for analysis, load a dataset first"


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class OrchestrationContext:
    """Shared state handed to the UI layer; each field has exactly one writer."""

    dataset_store: DatasetStore
    activity_log: ActivityLog
    current_result: Result | None = None
    in_flight: int = 0
    generation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def loading(self) -> bool:
        return self.in_flight > 0


class QueryOrchestrator:
    def __init__(
        self,
        context: OrchestrationContext,
        client: AnalysisClient,
        classifier: ResultClassifier | None = None,
    ) -> None:
        self.context = context
        self.client = client
        self.classifier = classifier or ResultClassifier()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def loading(self) -> bool:
        return self.context.loading

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=DISPATCH_WORKERS, thread_name_prefix="analytics-query")
            return self._executor

    def close(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None

    def submit(self, query_text: str, cancel_token: CancelToken | None = None) -> Result | None:
        try:
            query = self._validate(query_text)
        except EmptyQueryError:
            return None

        dataset = self.context.dataset_store.resolve_active_dataset()
        if dataset.is_empty:
            return self._fail_without_data()

        ctx = self.context
        with ctx.lock:
            ctx.generation += 1
            generation = ctx.generation
            ctx.in_flight += 1
        ctx.activity_log.replace([LogEntry(message=START_MESSAGE)])

        try:
            request = QueryRequest(
                query=query,
                data=list(dataset.records),
                columns=list(dataset.column_names),
            )
            try:
                body = self._dispatch(request, cancel_token)
            except Exception as exc:  # noqa: BLE001
                logger.error("Query failed: %s", exc)
                result: Result = self.classifier.classify_failure(exc)
                self._settle_error(result, generation)
            else:
                result = self.classifier.classify_success(body)
                self._settle_success(result, generation)
            return result
        finally:
            with ctx.lock:
                ctx.in_flight = max(0, ctx.in_flight - 1)

    def _validate(self, query_text: str) -> str:
        query = (query_text or "").strip()
        if not query:
            raise EmptyQueryError()
        return query

    def _fail_without_data(self) -> ErrorResult:
        result = self.classifier.classify_local(NoDataError())
        logger.warning("Query rejected: no data available")
        with self.context.lock:
            self.context.generation += 1
            self.context.current_result = result
        self.context.activity_log.error(NO_DATA_MESSAGE)
        return result

    def _dispatch(self, request: QueryRequest, cancel_token: CancelToken | None) -> QuerySuccessBody:
        if cancel_token is not None and cancel_token.cancelled:
            raise RequestCancelledError()

        future: Future[QuerySuccessBody] = self._pool().submit(self.client.post_query, request)
        # Hard ceiling in case the transport ignores its own timeout.
        deadline = self.client.connect_timeout_seconds + self.client.timeout_seconds
        waited = 0.0
        while True:
            try:
                return future.result(timeout=CANCEL_POLL_SECONDS)
            except FutureTimeoutError:
                waited += CANCEL_POLL_SECONDS
                if cancel_token is not None and cancel_token.cancelled:
                    future.cancel()
                    raise RequestCancelledError() from None
                if waited >= deadline:
                    future.cancel()
                    raise TransportTimeoutError(deadline) from None

    def _is_current(self, generation: int) -> bool:
        return generation == self.context.generation

    def _settle_success(self, result: AnalysisResult, generation: int) -> None:
        ctx = self.context
        with ctx.lock:
            if not self._is_current(generation):
                logger.debug("Discarding stale result from generation %s", generation)
                return
            ctx.current_result = result
        if result.logs:
            ctx.activity_log.replace(result.logs)

    def _settle_error(self, result: ErrorResult, generation: int) -> None:
        ctx = self.context
        with ctx.lock:
            if not self._is_current(generation):
                logger.debug("Discarding stale error from generation %s", generation)
                return
            ctx.current_result = result
        ctx.activity_log.error(f"ERROR: {result.message}")
        preview = (result.raw_trace or "")[:TRACE_PREVIEW_LENGTH]
        ctx.activity_log.error(f"Details: {preview or 'no additional information'}")
