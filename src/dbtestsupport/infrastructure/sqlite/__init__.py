"""
SQLite infrastructure package.

Provides the ephemeral connection handle shared by context instances.
"""

from dbtestsupport.infrastructure.sqlite.connection import (
    ConnectionHandle,
    Connector,
    connect_sqlite,
)

__all__ = [
    "ConnectionHandle",
    "Connector",
    "connect_sqlite",
]
