"""Tests for session-scoped storage"""
import json

from analytics import session_storage
from analytics.session_storage import FileSessionStorage, SessionStorage


def test_in_memory_storage():
    storage = SessionStorage()
    storage.set_item("k", "v")

    assert storage.get_item("k") == "v"
    storage.remove_item("k")
    assert storage.get_item("k") is None


def test_file_storage_survives_reopen(tmp_path):
    path = tmp_path / "session.json"
    FileSessionStorage(session_id="s1", path=path).set_item("uploadedData", "[]")

    reopened = FileSessionStorage(session_id="s1", path=path)

    assert reopened.get_item("uploadedData") == "[]"


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{oops", encoding="utf-8")

    assert FileSessionStorage(path=path).get_item("uploadedData") is None


def test_discard_removes_file(tmp_path):
    path = tmp_path / "session.json"
    storage = FileSessionStorage(path=path)
    storage.set_item("a", "1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}

    storage.discard()

    assert not path.exists()


def test_discard_drops_exit_hook(monkeypatch, tmp_path):
    registered = []
    monkeypatch.setattr(session_storage.atexit, "register", registered.append)
    monkeypatch.setattr(session_storage.atexit, "unregister", registered.remove)

    storage = FileSessionStorage(path=tmp_path / "session.json")
    assert registered == [storage.discard]

    storage.discard()

    assert registered == []
