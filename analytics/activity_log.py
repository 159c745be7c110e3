from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Literal

Severity = Literal["info", "error"]
SEVERITIES: set[str] = {"info", "error"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch seconds
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return _utc_now()
    text = str(value or "").strip()
    if not text:
        return _utc_now()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _utc_now()
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class LogEntry:
    message: str
    severity: Severity = "info"
    timestamp: datetime = field(default_factory=_utc_now)

    @classmethod
    def from_wire(cls, raw: Any) -> "LogEntry":
        """Build an entry from `{timestamp, message, severity?}` sent by the backend or uploader."""
        if isinstance(raw, LogEntry):
            return raw
        if not isinstance(raw, dict):
            return cls(message=str(raw))
        severity = str(raw.get("severity") or raw.get("level") or "info").strip().lower()
        return cls(
            message=str(raw.get("message", "")),
            severity=severity if severity in SEVERITIES else "info",  # type: ignore[arg-type]
            timestamp=_parse_timestamp(raw.get("timestamp")),
        )

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "severity": self.severity,
        }


class ActivityLog:
    """Ordered processing steps shown to the user; insertion order is display order."""

    def __init__(self, entries: Iterable[LogEntry] = ()) -> None:
        self._entries: list[LogEntry] = list(entries)
        self._lock = threading.Lock()

    def replace(self, entries: Iterable[LogEntry | dict[str, Any]]) -> None:
        new_entries = [LogEntry.from_wire(e) for e in entries]
        with self._lock:
            self._entries = new_entries

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def info(self, message: str) -> LogEntry:
        entry = LogEntry(message=message)
        self.append(entry)
        return entry

    def error(self, message: str) -> LogEntry:
        entry = LogEntry(message=message, severity="error")
        self.append(entry)
        return entry

    def entries(self) -> tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def as_state(self) -> list[dict[str, str]]:
        return [e.to_dict() for e in self.entries()]
