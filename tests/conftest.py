"""
Shared pytest fixtures.

Each test gets its own sink and its own controller; the controller fixture
releases whatever connection is still open when the test ends.
"""

from __future__ import annotations

from typing import Generator

import pytest

from dbtestsupport import (
    ConnectionLifecycleController,
    LogSink,
    SqlDecoder,
    TestContextFactory,
    create_lifecycle_controller,
)


@pytest.fixture
def log_sink() -> LogSink:
    return LogSink()


@pytest.fixture
def controller() -> Generator[ConnectionLifecycleController, None, None]:
    """Controller over a fresh in-memory database."""
    with create_lifecycle_controller() as ctrl:
        yield ctrl


@pytest.fixture
def factory() -> TestContextFactory:
    return TestContextFactory()


@pytest.fixture
def decoder() -> SqlDecoder:
    """Decoder that picks the dialect per record."""
    return SqlDecoder()
