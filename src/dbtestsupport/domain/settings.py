"""
Harness settings and per-context option overrides.

HarnessSettings describes how the ephemeral connection is opened.
ContextOptions is what a BoundConfiguration hands to the data-access layer:
a few known keys plus any extra key/value overrides the layer understands.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

IN_MEMORY_DATABASE = ":memory:"

_ISOLATION_LEVELS = ("", "DEFERRED", "IMMEDIATE", "EXCLUSIVE")


class QueryTracking(Enum):
    """Whether entities read by a context instance are tracked."""

    TRACK_ALL = "track_all"
    NO_TRACKING = "no_tracking"


class HarnessSettings(BaseModel):
    """Settings for opening the ephemeral SQLite connection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    database: str = Field(
        IN_MEMORY_DATABASE, description="SQLite database name; ':memory:' for ephemeral"
    )
    uri: bool = Field(False, description="Interpret 'database' as a file: URI")
    foreign_keys: bool = Field(True, description="Enable PRAGMA foreign_keys")
    command_timeout: float = Field(
        30, description="Seconds to wait on a locked database; default for contexts"
    )
    isolation_level: Optional[str] = Field(
        "", description="sqlite3 isolation level; None for autocommit"
    )

    @field_validator("database")
    @classmethod
    def validate_database(cls, v: str) -> str:
        """Database name must not be blank."""
        if not v or not v.strip():
            raise ValueError("Database name cannot be empty")
        return v.strip()

    @field_validator("command_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("command_timeout must be positive")
        return v

    @field_validator("isolation_level")
    @classmethod
    def validate_isolation_level(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        upper = v.strip().upper()
        if upper not in _ISOLATION_LEVELS:
            raise ValueError(
                f"isolation_level must be one of {_ISOLATION_LEVELS} or None, got {v!r}"
            )
        return upper

    @property
    def is_ephemeral(self) -> bool:
        """True when the database only lives as long as its connection."""
        if self.database == IN_MEMORY_DATABASE:
            return True
        return self.uri and "mode=memory" in self.database


class ContextOptions(BaseModel):
    """
    Options a data-access layer reads when building a context instance.

    Unknown keys are kept as extra fields so callers can pass arbitrary
    overrides through to their own layer.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    query_tracking: QueryTracking = Field(
        QueryTracking.TRACK_ALL, description="Track entities read by the instance"
    )
    command_timeout: float = Field(30, description="Per-command timeout in seconds")
    sensitive_data_logging: bool = Field(
        True, description="Log parameter values rather than masking them"
    )

    def option(self, key: str, default: Any = None) -> Any:
        """Look up a known or extra option by name."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})
