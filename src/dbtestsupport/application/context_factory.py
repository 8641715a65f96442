"""
Test context factory.

Composes a lifecycle controller, an optional log sink and option overrides
into a BoundConfiguration ready for the caller's data-access layer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from dbtestsupport.application.lifecycle import (
    BoundConfiguration,
    ConnectionLifecycleController,
    create_lifecycle_controller,
)
from dbtestsupport.domain.settings import ContextOptions, HarnessSettings
from dbtestsupport.infrastructure.log_sink import CallbackLogSink, LogTarget

logger = logging.getLogger(__name__)


class TestContextFactory:
    """
    Builds connection-bound configurations.

    The only side effect of build() is what the controller's create()
    performs; override validation happens first, before any connection is
    opened.
    """

    __test__ = False  # not a pytest test class

    def build(
        self,
        connection_source: ConnectionLifecycleController,
        log_sink: LogTarget | None = None,
        overrides: Mapping[str, Any] | None = None,
        *,
        log_to: Callable[[str], None] | None = None,
    ) -> BoundConfiguration:
        """
        Build a configuration bound to the source's shared connection.

        Args:
            connection_source: Controller owning the ephemeral connection
            log_sink: Sink receiving one LogRecord per executed operation
            overrides: Option key/values; unknown keys are passed through
            log_to: Alternative to log_sink taking plain message strings

        Raises:
            ConnectionInitError: Propagated from the controller
            ValueError: If both log_sink and log_to are given
            pydantic.ValidationError: If a known option has an invalid value
        """
        if log_sink is not None and log_to is not None:
            raise ValueError("Pass either log_sink or log_to, not both")

        options = self.build_options(connection_source.settings, overrides)
        target = log_sink if log_to is None else CallbackLogSink(log_to)

        config = connection_source.create(log_sink=target, options=options)
        logger.debug(
            "Built configuration on %s (logging=%s, overrides=%s)",
            config.connection.description,
            target is not None,
            sorted((overrides or {}).keys()),
        )
        return config

    @staticmethod
    def build_options(
        settings: HarnessSettings, overrides: Mapping[str, Any] | None = None
    ) -> ContextOptions:
        """Settings defaults overlaid with caller overrides."""
        values: dict[str, Any] = {"command_timeout": settings.command_timeout}
        values.update(overrides or {})
        return ContextOptions.model_validate(values)


def sqlite_in_memory_options(
    log_sink: LogTarget | None = None,
    overrides: Mapping[str, Any] | None = None,
    settings: HarnessSettings | None = None,
    *,
    log_to: Callable[[str], None] | None = None,
) -> BoundConfiguration:
    """
    One-call setup: a fresh in-memory database and a configuration bound to it.

    Use ``config.lifecycle`` to reach the controller (stop_next_dispose(),
    turn_off_dispose(), manual_dispose()).
    """
    controller = create_lifecycle_controller(settings)
    return TestContextFactory().build(controller, log_sink, overrides, log_to=log_to)
