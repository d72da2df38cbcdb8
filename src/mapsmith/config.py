"""Runtime configuration using Pydantic Settings.

This module defines the `Settings` class, which loads mapsmith's tunables from
``MAPSMITH_``-prefixed environment variables and an optional `.env` file. The
values act as process-wide defaults; every conversion function also accepts
explicit keyword overrides.

The `get_settings` function provides a cached, singleton instance of the
configuration. Tests (or long-lived processes that change the environment)
call ``get_settings.cache_clear()`` to pick up new values.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict as _SettingsConfigDict

from .tags import DEFAULT_TAG as _BUILTIN_TAG


class Settings(BaseSettings):
    """Defines all mapsmith configuration parameters.

    Environment variables map onto fields with the ``MAPSMITH_`` prefix, e.g.
    ``MAPSMITH_STRICT=true`` or ``MAPSMITH_DEFAULT_TAG=json``.
    """

    model_config = _SettingsConfigDict(
        env_prefix="MAPSMITH_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    DEFAULT_TAG: str = Field(
        default=_BUILTIN_TAG,
        description="Metadata scheme used by to_map/from_map when no scheme is given",
    )
    STRICT: bool = Field(
        default=False,
        description=(
            "Raise FieldNotSettable / KindMismatch / UnmappedKey instead of silently "
            "ignoring the offending write or key"
        ),
    )
    MAX_INLINE_DEPTH: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting of inline records before RecordCycleError is raised",
    )
    LOG_LEVEL: str = Field(default="WARNING", description="Logging level used by the CLI")

    @field_validator("DEFAULT_TAG", mode="before")
    @classmethod
    def normalize_tag(cls, v: object) -> str:
        """Trim whitespace; a blank scheme falls back to the built-in ``map``."""
        if isinstance(v, str):
            trimmed = v.strip()
            return trimmed or _BUILTIN_TAG
        return _BUILTIN_TAG

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> str:
        level = str(v).strip().upper() if v is not None else "WARNING"
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, singleton instance of the settings."""
    return Settings()
