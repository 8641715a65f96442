"""
Infrastructure layer package.

Contains everything that touches the outside world or external formats:
- Ephemeral SQLite connection handle (sqlite/)
- Captured-log decoding and SQL dialects (sql/)
- Log capture sinks
- Logging setup
"""

from dbtestsupport.infrastructure.sqlite import ConnectionHandle, connect_sqlite
from dbtestsupport.infrastructure.sql import (
    SqlDecoder,
    Dialect,
    DialectName,
    decode_message,
)
from dbtestsupport.infrastructure.log_sink import (
    LogSink,
    LogSinkHandler,
    CallbackLogSink,
    LogTarget,
)
from dbtestsupport.infrastructure.logging_config import setup_logging

__all__ = [
    # SQLite
    "ConnectionHandle",
    "connect_sqlite",
    # Decoding
    "SqlDecoder",
    "Dialect",
    "DialectName",
    "decode_message",
    # Capture
    "LogSink",
    "LogSinkHandler",
    "CallbackLogSink",
    "LogTarget",
    # Logging
    "setup_logging",
]
