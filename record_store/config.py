"""
Configuration settings for the record store.

Uses Pydantic Settings to load environment variables for the embedded store
location, logging, and workload defaults.
"""
from __future__ import annotations

import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_PATH = ":memory:"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Settings(BaseSettings):
    # Store
    store_path: str = Field(MEMORY_PATH, alias="STORE_PATH")
    store_table: str = Field("records", alias="STORE_TABLE")
    store_timeout_seconds: float = Field(5.0, alias="STORE_TIMEOUT_SECONDS", gt=0)
    store_connect_attempts: int = Field(3, alias="STORE_CONNECT_ATTEMPTS", ge=1)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Workload defaults
    workload_records: int = Field(10_000, alias="WORKLOAD_RECORDS", ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("store_table")
    @classmethod
    def _check_table_name(cls, value: str) -> str:
        return validate_table_name(value)

    @property
    def is_memory(self) -> bool:
        return self.store_path == MEMORY_PATH


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def validate_table_name(name: str) -> str:
    """Return ``name`` unchanged if it is a plain SQL identifier, else raise ValueError."""
    # Interpolated into DDL/DML, so only bare identifiers are accepted.
    if not _IDENTIFIER.match(name):
        raise ValueError(f"invalid table name: {name!r}")
    return name


__all__ = ["MEMORY_PATH", "Settings", "get_settings", "validate_table_name"]
