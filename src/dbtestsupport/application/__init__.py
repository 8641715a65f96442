"""
Application layer package.

Connection lifecycle control and configuration composition.
"""

from dbtestsupport.application.lifecycle import (
    BoundConfiguration,
    ConnectionLifecycleController,
    create_lifecycle_controller,
)
from dbtestsupport.application.context_factory import (
    TestContextFactory,
    sqlite_in_memory_options,
)

__all__ = [
    "BoundConfiguration",
    "ConnectionLifecycleController",
    "create_lifecycle_controller",
    "TestContextFactory",
    "sqlite_in_memory_options",
]
