"""
Embedded database connection factory for the record store.

Opens SQLite connections (in-memory by default, or a file path from settings),
bootstraps the single-table schema, and closes handles. Transient open failures
(locked or briefly unavailable database files) are retried with exponential
backoff using tenacity; once retries are exhausted the failure surfaces as
StoreUnavailable.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from record_store.config import get_settings, validate_table_name
from record_store.errors import StoreUnavailable
from record_store.utils.logging import get_logger

log = get_logger(__name__)

# Backoff between open attempts; kept short since the engine is in-process.
_OPEN_WAIT = wait_exponential(multiplier=0.05, min=0.05, max=1.0)


def _connect(path: str, timeout: float) -> sqlite3.Connection:
    return sqlite3.connect(path, timeout=timeout)


def open_connection(
    path: Optional[str] = None,
    attempts: Optional[int] = None,
    timeout: Optional[float] = None,
) -> sqlite3.Connection:
    """
    Open an embedded SQLite connection with automatic retry.

    Parameters
    ----------
    path : str, optional
        Database location. Defaults to ``settings.store_path`` (``:memory:``).
    attempts : int, optional
        Maximum number of open attempts. Defaults to ``settings.store_connect_attempts``.
    timeout : float, optional
        Seconds to wait on a locked database. Defaults to ``settings.store_timeout_seconds``.

    Returns
    -------
    sqlite3.Connection
        A new connection owned by the caller.

    Raises
    ------
    StoreUnavailable
        If the engine cannot be opened after all retry attempts.
    ValueError
        If ``attempts`` is less than 1.
    """
    settings = get_settings()
    target = path if path is not None else settings.store_path
    max_attempts = attempts if attempts is not None else settings.store_connect_attempts
    if max_attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {max_attempts}")
    busy_timeout = timeout if timeout is not None else settings.store_timeout_seconds

    retryer = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=_OPEN_WAIT,
        retry=retry_if_exception_type(sqlite3.OperationalError),
        before_sleep=lambda state: log.warning(
            "Store open failed, retrying",
            extra={"path": target, "attempt": state.attempt_number},
        ),
        reraise=True,
    )
    try:
        conn = retryer(_connect, target, busy_timeout)
    except sqlite3.Error as exc:
        log.exception("Store open failed", extra={"path": target, "attempts": max_attempts})
        raise StoreUnavailable("open", f"cannot open record store at {target!r}: {exc}") from exc

    log.debug("Store opened", extra={"path": target})
    return conn


def initialize_schema(conn: sqlite3.Connection, table: str) -> None:
    """
    Create the ``(id INTEGER PRIMARY KEY, value TEXT)`` table if it is missing.

    Raises
    ------
    StoreUnavailable
        If the DDL statement fails.
    """
    validate_table_name(table)
    try:
        with conn:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {table} (id INTEGER PRIMARY KEY, value TEXT);"
            )
    except sqlite3.Error as exc:
        log.exception("Schema initialization failed", extra={"table": table})
        raise StoreUnavailable("initialize", f"cannot initialize table {table!r}: {exc}") from exc


def close_connection(conn: sqlite3.Connection) -> None:
    """
    Close a connection, logging instead of raising if the engine refuses.

    Used on teardown paths where an earlier error must not be masked.
    """
    try:
        conn.close()
    except sqlite3.Error:
        log.warning("Store close failed", exc_info=True)


__all__ = [
    "open_connection",
    "initialize_schema",
    "close_connection",
]
