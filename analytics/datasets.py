from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Protocol, Sequence

from .activity_log import ActivityLog
from .sample_data import SAMPLE_RECORDS
from .session_storage import UPLOADED_COLUMNS_KEY, UPLOADED_DATA_KEY, SessionStorage

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5

DatasetOrigin = Literal["upload", "session", "demo"]
Record = dict[str, Any]


@dataclass(frozen=True, slots=True)
class Dataset:
    records: tuple[Record, ...]
    column_names: tuple[str, ...]
    origin: DatasetOrigin = "upload"

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        column_names: Sequence[str] | None = None,
        origin: DatasetOrigin = "upload",
    ) -> "Dataset":
        rows = tuple(dict(r) for r in records)
        if column_names is None:
            column_names = list(rows[0].keys()) if rows else []
        return cls(records=rows, column_names=tuple(str(c) for c in column_names), origin=origin)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Dataset":
        """Build from the uploader payload `{rows, columns, sample, columnNames, data, logs?}`."""
        data = payload.get("data") or []
        names = payload.get("columnNames")
        return cls.from_records(data, names if isinstance(names, list) else None, origin="upload")

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def column_count(self) -> int:
        return len(self.column_names)

    @property
    def sample(self) -> tuple[Record, ...]:
        return self.records[:SAMPLE_SIZE]

    @property
    def is_empty(self) -> bool:
        return not self.records

    def summary(self) -> dict[str, Any]:
        return {
            "rows": self.row_count,
            "columns": self.column_count,
            "column_names": list(self.column_names),
            "sample": [dict(r) for r in self.sample],
            "origin": self.origin,
        }


class DatasetResolver(Protocol):
    name: str

    def resolve(self) -> Dataset | None: ...


class MemoryResolver:
    name = "memory"

    def __init__(self, store: "DatasetStore") -> None:
        self._store = store

    def resolve(self) -> Dataset | None:
        return self._store.current


class SessionResolver:
    name = "session"

    def __init__(self, storage: SessionStorage) -> None:
        self._storage = storage

    def _columns(self) -> list[str]:
        raw = self._storage.get_item(UPLOADED_COLUMNS_KEY)
        if raw is None:
            return []
        try:
            columns = json.loads(raw)
        except ValueError:
            logger.warning("Stored column names are not valid JSON; using an empty column list")
            return []
        if not isinstance(columns, list):
            return []
        return [str(c) for c in columns]

    def resolve(self) -> Dataset | None:
        raw = self._storage.get_item(UPLOADED_DATA_KEY)
        if raw is None:
            return None
        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning("Stored dataset is not valid JSON; ignoring it")
            return None
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            logger.warning("Stored dataset is not a list of records; ignoring it")
            return None
        return Dataset.from_records(records, self._columns(), origin="session")


class DemoResolver:
    name = "demo"

    def __init__(self, records: Sequence[Mapping[str, Any]] | None = None) -> None:
        self._records = SAMPLE_RECORDS if records is None else records

    def resolve(self) -> Dataset | None:
        return Dataset.from_records(self._records, origin="demo")


class DatasetStore:
    """Answers "what data do we operate on right now"; never raises."""

    def __init__(
        self,
        storage: SessionStorage,
        activity_log: ActivityLog,
        demo_records: Sequence[Mapping[str, Any]] | None = None,
    ) -> None:
        self._storage = storage
        self._activity_log = activity_log
        self._current: Dataset | None = None
        self._lock = threading.Lock()
        self.resolvers: list[DatasetResolver] = [
            MemoryResolver(self),
            SessionResolver(storage),
            DemoResolver(demo_records),
        ]

    @property
    def current(self) -> Dataset | None:
        with self._lock:
            return self._current

    def _set_current(self, dataset: Dataset) -> None:
        with self._lock:
            self._current = dataset

    def resolve_active_dataset(self) -> Dataset:
        for resolver in self.resolvers:
            dataset = resolver.resolve()
            if dataset is None:
                continue
            if resolver.name != "memory":
                logger.debug("Resolved dataset from %s: %s rows", resolver.name, dataset.row_count)
                self._set_current(dataset)
            return dataset

        # DemoResolver always answers; kept for custom resolver chains.
        empty = Dataset.from_records([], origin="demo")
        self._set_current(empty)
        return empty

    def on_data_loaded(self, payload: Mapping[str, Any]) -> Dataset:
        dataset = Dataset.from_payload(payload)
        self._set_current(dataset)
        logger.info("Dataset loaded: %s rows, %s columns", dataset.row_count, dataset.column_count)

        logs = payload.get("logs")
        if isinstance(logs, list) and logs:
            self._activity_log.replace(logs)
        return dataset

    def clear(self) -> None:
        with self._lock:
            self._current = None
