"""
Infrastructure package for the record store.

Centralizes embedded database connectivity concerns (open with retry, schema
bootstrap, close). Keep this layer focused on I/O and resource management,
decoupled from the CRUD logic in ``record_store.store``.
"""

from record_store.infrastructure.db_factory import (
    close_connection,
    initialize_schema,
    open_connection,
)

__all__ = [
    "close_connection",
    "initialize_schema",
    "open_connection",
]
