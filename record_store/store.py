"""
CRUD wrapper over an embedded single-table SQLite store.

Each mutating call runs in its own transaction (``with connection:``), so its
effect is committed and visible to the next call on the same handle. A missing
record is a normal outcome: ``read``/``get`` return ``None`` and
``update``/``delete`` report zero affected rows.

Usage:
    from record_store.store import store_session

    with store_session() as store:
        store.insert(1, "test_value")
        assert store.read(1) == "test_value"
        store.delete(1)
        assert store.read(1) is None
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Generator, List, Optional

from record_store.config import get_settings, validate_table_name
from record_store.domain.models import Record
from record_store.errors import DuplicateRecord, StoreUnavailable
from record_store.infrastructure.db_factory import (
    close_connection,
    initialize_schema,
    open_connection,
)
from record_store.utils.logging import get_logger

log = get_logger(__name__)

SQLITE_MIN_ID = -(2**63)
SQLITE_MAX_ID = 2**63 - 1


def _check_id(record_id: Any) -> int:
    # bool is an int subclass but never a meaningful key
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        raise TypeError(f"record id must be an int, got {type(record_id).__name__}")
    return record_id


def _storable(record_id: int) -> bool:
    # SQLite INTEGER is a signed 64-bit value
    return SQLITE_MIN_ID <= record_id <= SQLITE_MAX_ID


def _check_value(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"record value must be a str, got {type(value).__name__}")
    return value


class RecordStore:
    """
    Insert, read, update and delete records keyed by integer id.

    Parameters
    ----------
    conn : sqlite3.Connection
        An open connection. The schema is created on it if missing.
    table : str
        Table name; must be a plain SQL identifier.
    owns_connection : bool
        Whether ``close()`` should close ``conn``. Stores built by ``open()``
        own their connection; stores wrapping a caller's connection do not.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        table: str = "records",
        owns_connection: bool = False,
    ) -> None:
        self._table = validate_table_name(table)
        self._conn: Optional[sqlite3.Connection] = conn
        self._owns_connection = owns_connection
        initialize_schema(conn, self._table)

        self._sql_insert = f"INSERT INTO {self._table} (id, value) VALUES (?, ?);"
        self._sql_select = f"SELECT id, value FROM {self._table} WHERE id = ?;"
        self._sql_update = f"UPDATE {self._table} SET value = ? WHERE id = ?;"
        self._sql_delete = f"DELETE FROM {self._table} WHERE id = ?;"
        self._sql_count = f"SELECT COUNT(*) FROM {self._table};"
        self._sql_all = f"SELECT id, value FROM {self._table} ORDER BY id;"

    @classmethod
    def open(cls, path: Optional[str] = None, table: Optional[str] = None) -> "RecordStore":
        """
        Open a new connection via the factory and wrap it in a store that owns it.

        Defaults come from settings (``STORE_PATH``, ``STORE_TABLE``).
        """
        settings = get_settings()
        conn = open_connection(path)
        try:
            return cls(conn, table=table or settings.store_table, owns_connection=True)
        except Exception:
            close_connection(conn)
            raise

    @property
    def table(self) -> str:
        return self._table

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        """Release the handle. Safe to call more than once."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        if self._owns_connection:
            close_connection(conn)
        log.debug("Store closed", extra={"table": self._table})

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _connection(self, operation: str) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailable(operation, f"record store is closed (during '{operation}')")
        return self._conn

    def _fail(self, operation: str, exc: sqlite3.Error) -> StoreUnavailable:
        log.exception(
            f"Store {operation} failed", extra={"table": self._table, "operation": operation}
        )
        return StoreUnavailable(operation, f"{operation} on {self._table!r} failed: {exc}")

    # CRUD

    def insert(self, record_id: int, value: str) -> None:
        """
        Create a record.

        Raises
        ------
        DuplicateRecord
            If a record with ``record_id`` already exists. The stored value is unchanged.
        StoreUnavailable
            If the engine fails to execute the statement.
        ValueError
            If ``record_id`` does not fit in a signed 64-bit SQLite INTEGER.
        """
        _check_id(record_id)
        _check_value(value)
        conn = self._connection("insert")
        if not _storable(record_id):
            raise ValueError(
                f"record id {record_id} is outside the SQLite INTEGER range "
                f"[{SQLITE_MIN_ID}, {SQLITE_MAX_ID}]"
            )
        try:
            with conn:
                conn.execute(self._sql_insert, (record_id, value))
        except sqlite3.IntegrityError as exc:
            log.warning(
                "Duplicate record id", extra={"table": self._table, "record_id": record_id}
            )
            raise DuplicateRecord(record_id) from exc
        except sqlite3.Error as exc:
            raise self._fail("insert", exc) from exc
        log.debug("Record inserted", extra={"table": self._table, "record_id": record_id})

    def get(self, record_id: int) -> Optional[Record]:
        """Return the full record, or None if there is no row for ``record_id``."""
        _check_id(record_id)
        conn = self._connection("read")
        if not _storable(record_id):
            return None
        try:
            row = conn.execute(self._sql_select, (record_id,)).fetchone()
        except sqlite3.Error as exc:
            raise self._fail("read", exc) from exc
        return Record.from_row(row) if row is not None else None

    def read(self, record_id: int) -> Optional[str]:
        """
        Return the value stored for ``record_id``, or None if absent.

        A stored empty string is returned as ``""``; only a missing row yields None.
        """
        record = self.get(record_id)
        return record.value if record is not None else None

    def exists(self, record_id: int) -> bool:
        return self.get(record_id) is not None

    def update(self, record_id: int, value: str) -> int:
        """
        Replace the value of an existing record.

        Returns the number of rows affected: 1, or 0 when no record exists
        (in which case nothing is inserted).
        """
        _check_id(record_id)
        _check_value(value)
        conn = self._connection("update")
        if not _storable(record_id):
            return 0
        try:
            with conn:
                affected = conn.execute(self._sql_update, (value, record_id)).rowcount
        except sqlite3.Error as exc:
            raise self._fail("update", exc) from exc
        log.debug(
            "Record updated",
            extra={"table": self._table, "record_id": record_id, "affected": affected},
        )
        return affected

    def delete(self, record_id: int) -> int:
        """Remove the record if present. Returns rows affected (1 or 0)."""
        _check_id(record_id)
        conn = self._connection("delete")
        if not _storable(record_id):
            return 0
        try:
            with conn:
                affected = conn.execute(self._sql_delete, (record_id,)).rowcount
        except sqlite3.Error as exc:
            raise self._fail("delete", exc) from exc
        log.debug(
            "Record deleted",
            extra={"table": self._table, "record_id": record_id, "affected": affected},
        )
        return affected

    def count(self) -> int:
        conn = self._connection("count")
        try:
            (total,) = conn.execute(self._sql_count).fetchone()
        except sqlite3.Error as exc:
            raise self._fail("count", exc) from exc
        return total

    def records(self) -> List[Record]:
        """All records ordered by id."""
        conn = self._connection("records")
        try:
            rows = conn.execute(self._sql_all).fetchall()
        except sqlite3.Error as exc:
            raise self._fail("records", exc) from exc
        return [Record.from_row(row) for row in rows]


@contextmanager
def store_session(
    path: Optional[str] = None, table: Optional[str] = None
) -> Generator[RecordStore, None, None]:
    """
    Context manager yielding a freshly opened store.

    The handle is closed on exit whether or not the body raised.

    Example
    -------
        with store_session() as store:
            store.insert(1, "initial_value")
            store.update(1, "updated_value")
    """
    store = RecordStore.open(path=path, table=table)
    try:
        yield store
    finally:
        store.close()


__all__ = ["RecordStore", "store_session"]
