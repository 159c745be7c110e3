import json
import threading

import pytest

from analytics.activity_log import ActivityLog
from analytics.backend import AnalysisClient
from analytics.datasets import DatasetStore
from analytics.orchestrator import OrchestrationContext, QueryOrchestrator
from analytics.schemas import QuerySuccessBody
from analytics.session_storage import SessionStorage


class FakeClient(AnalysisClient):
    """Records requests and answers from a queue of bodies or exceptions."""

    def __init__(self, *answers, timeout_seconds=5.0, connect_timeout_seconds=1.0):
        super().__init__(
            base_url="http://backend.test",
            timeout_seconds=timeout_seconds,
            connect_timeout_seconds=connect_timeout_seconds,
        )
        self.answers = list(answers)
        self.requests = []
        self._lock = threading.Lock()

    def post_query(self, request):
        with self._lock:
            self.requests.append(request)
            answer = self.answers.pop(0) if self.answers else {}
        if callable(answer):
            answer = answer(request)
        if isinstance(answer, BaseException):
            raise answer
        return QuerySuccessBody.model_validate(answer)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


@pytest.fixture
def storage():
    return SessionStorage()


@pytest.fixture
def activity_log():
    return ActivityLog()


@pytest.fixture
def make_orchestrator(storage, activity_log):
    created = []

    def _make(*answers, demo_records=None, client=None):
        store = DatasetStore(storage, activity_log, demo_records=demo_records)
        context = OrchestrationContext(dataset_store=store, activity_log=activity_log)
        orchestrator = QueryOrchestrator(context, client or FakeClient(*answers))
        created.append(orchestrator)
        return orchestrator

    yield _make
    for orchestrator in created:
        orchestrator.close()
