"""
Integration tests for on-disk record stores.

These tests open real SQLite files under pytest's tmp_path and verify that:
1. Rows survive across sessions when the store is file-backed
2. In-memory sessions never share state
3. Sessions release their handle even when the body raises
4. The workload runner leaves a file-backed store empty
"""

from __future__ import annotations

import sqlite3

import pytest

from record_store.errors import DuplicateRecord
from record_store.store import RecordStore, store_session
from record_store.workload import run_workload

pytestmark = pytest.mark.integration

RECORD_ID = 1
WORKLOAD_RECORDS = 20


class TestPersistence:
    """Rows written in one session are visible in the next."""

    def test_file_store_persists_across_sessions(self, store_file: str):
        with store_session(path=store_file) as store:
            store.insert(RECORD_ID, "test_value")

        with store_session(path=store_file) as store:
            assert store.read(RECORD_ID) == "test_value"

    def test_update_and_delete_persist(self, store_file: str):
        with store_session(path=store_file) as store:
            store.insert(RECORD_ID, "initial_value")
            store.insert(2, "to_delete")
            store.update(RECORD_ID, "updated_value")
            store.delete(2)

        with store_session(path=store_file) as store:
            assert store.read(RECORD_ID) == "updated_value"
            assert store.read(2) is None
            assert store.count() == 1

    def test_settings_path_is_used_by_default(self, store_file: str, monkeypatch):
        monkeypatch.setenv("STORE_PATH", store_file)

        with store_session() as store:
            store.insert(RECORD_ID, "from_env")

        with RecordStore.open(path=store_file) as store:
            assert store.read(RECORD_ID) == "from_env"

    def test_duplicate_across_sessions_is_rejected(self, store_file: str):
        with store_session(path=store_file) as store:
            store.insert(RECORD_ID, "original")

        with store_session(path=store_file) as store:
            with pytest.raises(DuplicateRecord):
                store.insert(RECORD_ID, "again")
            assert store.read(RECORD_ID) == "original"

    def test_committed_rows_are_visible_to_other_connections(self, store_file: str):
        with store_session(path=store_file) as store:
            store.insert(RECORD_ID, "test_value")

            other = sqlite3.connect(store_file)
            try:
                row = other.execute("SELECT value FROM records WHERE id = ?;", (RECORD_ID,))
                assert row.fetchone() == ("test_value",)
            finally:
                other.close()


class TestSessionLifecycle:
    """Sessions are scoped resources."""

    def test_memory_sessions_are_isolated(self):
        with store_session() as store:
            store.insert(RECORD_ID, "test_value")

        with store_session() as store:
            assert store.read(RECORD_ID) is None

    def test_session_closes_handle_when_body_raises(self, store_file: str):
        captured = {}

        with pytest.raises(RuntimeError, match="body failed"):
            with store_session(path=store_file) as store:
                captured["store"] = store
                captured["conn"] = store._conn
                store.insert(RECORD_ID, "test_value")
                raise RuntimeError("body failed")

        assert captured["store"].closed
        with pytest.raises(sqlite3.ProgrammingError):
            captured["conn"].execute("SELECT 1;")

        with store_session(path=store_file) as store:
            assert store.read(RECORD_ID) == "test_value"


class TestWorkload:
    """Workload runs against a file-backed store."""

    def test_workload_leaves_store_empty(self, store_file: str):
        results = run_workload(records=WORKLOAD_RECORDS, path=store_file, table="bench")

        assert [r["operations"] for r in results] == [WORKLOAD_RECORDS] * 4
        with store_session(path=store_file, table="bench") as store:
            assert store.count() == 0
