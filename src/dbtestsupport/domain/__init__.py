"""
Domain layer package.

Contains pure value types, settings models, error kinds and the disposal
state machine. Nothing here performs I/O.
"""

from dbtestsupport.domain.errors import (
    DbTestSupportError,
    ConnectionInitError,
    UseAfterReleaseError,
    DecodeError,
    UnresolvedPlaceholderError,
    ParameterFormatError,
)
from dbtestsupport.domain.log_record import LogRecord, DecodedStatement
from dbtestsupport.domain.disposal import (
    DisposalMode,
    DisposeDecision,
    InvalidTransition,
    on_dispose_requested,
    on_stop_next_dispose,
    on_turn_off_dispose,
    on_manual_dispose,
)
from dbtestsupport.domain.settings import (
    HarnessSettings,
    ContextOptions,
    QueryTracking,
    IN_MEMORY_DATABASE,
)

__all__ = [
    # Errors
    "DbTestSupportError",
    "ConnectionInitError",
    "UseAfterReleaseError",
    "DecodeError",
    "UnresolvedPlaceholderError",
    "ParameterFormatError",
    # Values
    "LogRecord",
    "DecodedStatement",
    # Disposal state machine
    "DisposalMode",
    "DisposeDecision",
    "InvalidTransition",
    "on_dispose_requested",
    "on_stop_next_dispose",
    "on_turn_off_dispose",
    "on_manual_dispose",
    # Settings
    "HarnessSettings",
    "ContextOptions",
    "QueryTracking",
    "IN_MEMORY_DATABASE",
]
