"""
Domain models for the record store.

Defines the record schema aligned with the single ``(id, value)`` table the
store manages.
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, Field


class Record(BaseModel):
    """
    Representation of a single row in the records table.
    """

    id: int = Field(..., description="Primary key.")
    value: Optional[str] = Field(None, description="Text payload; NULL is allowed.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
        "strict": True,
    }

    @classmethod
    def from_row(cls, row: Tuple[int, Optional[str]]) -> "Record":
        return cls(id=row[0], value=row[1])


__all__ = ["Record"]
