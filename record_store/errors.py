"""
Error hierarchy for the record store.

A missing record is never an error: reads return ``None`` and updates/deletes
report zero affected rows. Only engine failures and primary-key conflicts are
raised.
"""

from __future__ import annotations

from typing import Optional


class RecordStoreError(Exception):
    """Base class for all record store errors."""


class StoreUnavailable(RecordStoreError):
    """
    The embedded engine failed to open, initialize, or execute a statement.

    Attributes
    ----------
    operation : str
        Name of the store operation that failed (e.g. ``"open"``, ``"read"``).
    """

    def __init__(self, operation: str, message: Optional[str] = None) -> None:
        self.operation = operation
        super().__init__(message or f"record store unavailable during '{operation}'")


class DuplicateRecord(RecordStoreError):
    """An insert targeted an id that already has a record."""

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"record with id={record_id} already exists")


__all__ = ["RecordStoreError", "StoreUnavailable", "DuplicateRecord"]
