"""
Domain package for the record store.

Exports the core domain models used by the store and the workload runner.
Keep this package focused on data definitions and validation concerns.
"""

from record_store.domain.models import Record

__all__ = [
    "Record",
]
