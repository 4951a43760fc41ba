"""
Record Store - CRUD access to an embedded single-table SQLite store.

This package wraps an in-process relational engine (in-memory by default) with
a small contract:

- ``insert(id, value)`` creates a record; a duplicate id raises DuplicateRecord
- ``read(id)`` returns the value, or None when no record exists
- ``update(id, value)`` / ``delete(id)`` report rows affected; missing ids are no-ops

Engine failures surface as StoreUnavailable, never as "not found".
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from record_store.config import Settings, get_settings
from record_store.domain.models import Record
from record_store.errors import DuplicateRecord, RecordStoreError, StoreUnavailable
from record_store.store import RecordStore, store_session
from record_store.utils.logging import configure_logging, get_logger
from record_store.workload import run_workload

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Store
    "Record",
    "RecordStore",
    "store_session",
    # Errors
    "RecordStoreError",
    "StoreUnavailable",
    "DuplicateRecord",
    # Workload
    "run_workload",
    # Logging
    "configure_logging",
    "get_logger",
]
