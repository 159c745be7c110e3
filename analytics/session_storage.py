from __future__ import annotations

import atexit
import json
import logging
import threading
from contextlib import suppress
from pathlib import Path
from uuid import uuid4

from shared.constants import analytics_home, ensure_dirs

logger = logging.getLogger(__name__)

UPLOADED_DATA_KEY = "uploadedData"
UPLOADED_COLUMNS_KEY = "uploadedColumns"


class SessionStorage:
    """String key/value store scoped to the current session."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


def session_file_path(session_id: str) -> Path:
    return analytics_home() / "session" / f"{session_id}.json"


class FileSessionStorage(SessionStorage):
    """Session storage mirrored to a JSON file so a window reload can read it back.

    The file is deleted at interpreter exit.
    """

    def __init__(self, session_id: str | None = None, path: Path | None = None) -> None:
        super().__init__()
        self.session_id = session_id or str(uuid4())
        if path is None:
            ensure_dirs()
            path = session_file_path(self.session_id)
        self.path = path
        self._items = self._read()
        atexit.register(self.discard)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Session file %s is unreadable; starting empty", self.path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items() if isinstance(v, str)}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._items, ensure_ascii=False), encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)
            self._write()

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)
            self._write()

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._write()

    def discard(self) -> None:
        atexit.unregister(self.discard)
        with suppress(OSError):
            self.path.unlink(missing_ok=True)
