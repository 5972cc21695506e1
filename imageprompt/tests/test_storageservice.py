"""Tests for :mod:`imageprompt.storageservice.storageservice`."""

from __future__ import annotations

import sqlite3
import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from imageprompt.storageservice.storageservice import MemoryStorageService, StorageService


@pytest.fixture
def storage_service(tmp_path) -> StorageService:
    service = StorageService(str(tmp_path / "storage.db"))
    try:
        yield service
    finally:
        service.close()


def test_missing_slot_returns_none(storage_service: StorageService) -> None:
    assert storage_service.get("contents") is None


def test_set_overwrites_existing_value(storage_service: StorageService) -> None:
    storage_service.set("contents", "first")
    storage_service.set("contents", "second")

    assert storage_service.get("contents") == "second"


def test_slots_are_independent(storage_service: StorageService) -> None:
    storage_service.set("contents", "a red cube")
    storage_service.set("Images", "[]")

    assert storage_service.get("contents") == "a red cube"
    assert storage_service.get("Images") == "[]"


def test_values_survive_reopening_the_database(tmp_path) -> None:
    db_path = str(tmp_path / "state.db")
    first = StorageService(db_path)
    first.set("contents", "persist me")
    first.close()

    second = StorageService(db_path)
    try:
        assert second.get("contents") == "persist me"
    finally:
        second.close()


def test_schema_version_is_recorded(storage_service: StorageService) -> None:
    conn = sqlite3.connect(storage_service.db_path)
    try:
        assert conn.execute("PRAGMA user_version;").fetchone()[0] == 1
    finally:
        conn.close()


def test_each_thread_gets_its_own_connection(storage_service: StorageService) -> None:
    storage_service.set("contents", "main thread")
    seen: list[str | None] = []

    def _worker() -> None:
        seen.append(storage_service.get("contents"))
        storage_service.close()

    thread = threading.Thread(target=_worker)
    thread.start()
    thread.join()

    assert seen == ["main thread"]


def test_memory_storage_service_behaves_like_a_store() -> None:
    store = MemoryStorageService({"contents": "seed"})

    assert store.get("contents") == "seed"
    assert store.get("Images") is None
    store.set("Images", "[]")
    assert store.get("Images") == "[]"
