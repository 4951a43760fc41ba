"""
Pytest configuration for the record store.

Provides fixtures for:
- Settings isolation (env overrides, cache reset)
- A fresh in-memory store per test
- On-disk store paths for integration tests
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Generator

import pytest
from tenacity import wait_none

from record_store.config import get_settings
from record_store.infrastructure import db_factory
from record_store.store import RecordStore

_SETTINGS_ENV = (
    "STORE_PATH",
    "STORE_TABLE",
    "STORE_TIMEOUT_SECONDS",
    "STORE_CONNECT_ATTEMPTS",
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "WORKLOAD_RECORDS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Strip store-related env vars and reset the settings cache around each test.
    """
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fast_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove the backoff between open attempts."""
    monkeypatch.setattr(db_factory, "_OPEN_WAIT", wait_none())


@pytest.fixture
def store() -> Generator[RecordStore, None, None]:
    """
    A fresh in-memory store, discarded after the test.
    """
    record_store = RecordStore.open()
    try:
        yield record_store
    finally:
        record_store.close()


@pytest.fixture
def raw_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    A bare in-memory connection for tests that wrap a caller-owned handle.
    """
    conn = sqlite3.connect(":memory:")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def store_file(tmp_path: Path) -> str:
    """
    Path for an on-disk store that lives only for the test.
    """
    return str(tmp_path / "records.db")
