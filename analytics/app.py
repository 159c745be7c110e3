from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import webview

from .activity_log import ActivityLog
from .backend import AnalysisClient
from .cards import render_cards_to_html, render_log_html, result_to_cards
from .config import AnalyticsConfig, load_config
from .datasets import DatasetStore
from .errors import UploadError
from .orchestrator import OrchestrationContext, QueryOrchestrator
from .session_storage import FileSessionStorage, SessionStorage
from .uploader import upload_file

logger = logging.getLogger(__name__)


class AnalyticsApi:
    """Methods exposed to the page through pywebview's `js_api` bridge."""

    def __init__(
        self,
        config: AnalyticsConfig | None = None,
        storage: SessionStorage | None = None,
        client: AnalysisClient | None = None,
        demo_records: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        self._config = config or load_config()
        self._storage = storage if storage is not None else FileSessionStorage()
        activity_log = ActivityLog()
        self._context = OrchestrationContext(
            dataset_store=DatasetStore(self._storage, activity_log, demo_records=demo_records),
            activity_log=activity_log,
        )
        self._orchestrator = QueryOrchestrator(
            self._context,
            client or AnalysisClient.from_config(self._config),
        )
        self._upload_error: str = ""

    def _state(self) -> dict:
        ctx = self._context
        dataset = ctx.dataset_store.resolve_active_dataset()
        result = ctx.current_result
        entries = ctx.activity_log.entries()
        return {
            "dataset": dataset.summary(),
            "demo_mode": dataset.origin == "demo",
            "loading": ctx.loading,
            "result": result.to_dict() if result is not None else None,
            "result_html": render_cards_to_html(result_to_cards(result)) if result is not None else "",
            "logs": [e.to_dict() for e in entries],
            "logs_html": render_log_html(entries),
            "upload_error": self._upload_error,
        }

    def get_initial_state(self) -> dict:
        return self._state()

    def get_state(self) -> dict:
        return self._state()

    def submit_query(self, text: str) -> dict:
        if self._orchestrator.loading:
            logger.debug("Ignoring submission while a query is loading")
            return self._state()
        self._orchestrator.submit(text)
        return self._state()

    def load_file(self, path: str) -> dict:
        self._upload_error = ""
        try:
            upload_file(path, self._storage, self._context.dataset_store.on_data_loaded)
        except UploadError as exc:
            logger.error("Upload failed: %s", exc)
            self._upload_error = str(exc)
        return self._state()

    def attach_file(self) -> dict:
        window = webview.windows[0]
        selected = window.create_file_dialog(
            webview.OPEN_DIALOG,
            allow_multiple=False,
            file_types=("Data files (*.csv;*.xlsx)", "All files (*.*)"),
        )
        if not selected:
            return self._state()
        return self.load_file(str(selected[0]))

    def close(self) -> None:
        self._orchestrator.close()


def _assets_index_uri() -> str:
    return (Path(__file__).parent / "assets" / "index.html").resolve().as_uri()


def run_app(config: AnalyticsConfig | None = None) -> None:
    config = config or load_config()
    api = AnalyticsApi(config=config)
    webview.create_window(
        "NLP Data Analytics",
        url=_assets_index_uri(),
        js_api=api,
        width=1280,
        height=820,
    )
    try:
        webview.start(debug=config.webview_debug, http_server=True)
    except TypeError:
        webview.start(debug=config.webview_debug)
    finally:
        api.close()
