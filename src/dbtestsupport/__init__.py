"""
dbtestsupport - Test support for database-backed code.

Provisions an ephemeral in-memory SQLite database that several successive
context instances can share, captures the command log those instances emit,
and decodes captured messages into literal SQL for assertions.

Usage:
    from dbtestsupport import (
        LogSink, SqlDecoder, TestContextFactory, create_lifecycle_controller,
    )

    sink = LogSink()
    controller = create_lifecycle_controller()
    config = TestContextFactory().build(controller, sink)
    controller.stop_next_dispose()

    ... run your data layer against config ...

    decoded = SqlDecoder().decode(sink.last())
    assert decoded[-1] == 'WHERE "b"."BookId" = 1'
"""

__version__ = "0.1.0"
__author__ = "dbtestsupport Team"

from dbtestsupport.domain import (
    DbTestSupportError,
    ConnectionInitError,
    UseAfterReleaseError,
    DecodeError,
    UnresolvedPlaceholderError,
    ParameterFormatError,
    LogRecord,
    DecodedStatement,
    DisposalMode,
    HarnessSettings,
    ContextOptions,
    QueryTracking,
)
from dbtestsupport.infrastructure import (
    ConnectionHandle,
    LogSink,
    LogSinkHandler,
    CallbackLogSink,
    SqlDecoder,
    Dialect,
    DialectName,
    decode_message,
    setup_logging,
)
from dbtestsupport.application import (
    BoundConfiguration,
    ConnectionLifecycleController,
    create_lifecycle_controller,
    TestContextFactory,
    sqlite_in_memory_options,
)

__all__ = [
    "__version__",
    # Errors
    "DbTestSupportError",
    "ConnectionInitError",
    "UseAfterReleaseError",
    "DecodeError",
    "UnresolvedPlaceholderError",
    "ParameterFormatError",
    # Values and settings
    "LogRecord",
    "DecodedStatement",
    "DisposalMode",
    "HarnessSettings",
    "ContextOptions",
    "QueryTracking",
    # Capture and decoding
    "ConnectionHandle",
    "LogSink",
    "LogSinkHandler",
    "CallbackLogSink",
    "SqlDecoder",
    "Dialect",
    "DialectName",
    "decode_message",
    "setup_logging",
    # Lifecycle
    "BoundConfiguration",
    "ConnectionLifecycleController",
    "create_lifecycle_controller",
    "TestContextFactory",
    "sqlite_in_memory_options",
]
