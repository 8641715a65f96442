"""
Connection lifecycle controller.

An in-memory SQLite database vanishes the moment its only connection closes,
yet tests often need several independent context instances over the same
data (to prove caching or tracking behaviour). The controller owns that one
connection and decides, per its DisposalMode, whether a context instance's
teardown actually releases it.

Usage:
    controller = create_lifecycle_controller()
    config = controller.create()
    controller.stop_next_dispose()

    with BookContext(config) as context:      # teardown suppressed
        context.seed()
    with BookContext(config) as context:      # same data, fresh instance
        ...                                   # teardown releases

Thread model: synchronous and lock-free. Callers must not use two context
instances bound to the same handle at the same time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dbtestsupport.domain.disposal import (
    DisposalMode,
    on_dispose_requested,
    on_manual_dispose,
    on_stop_next_dispose,
    on_turn_off_dispose,
)
from dbtestsupport.domain.errors import UseAfterReleaseError
from dbtestsupport.domain.log_record import DEFAULT_EVENT, LogRecord
from dbtestsupport.domain.settings import ContextOptions, HarnessSettings
from dbtestsupport.infrastructure.log_sink import LogTarget
from dbtestsupport.infrastructure.sqlite.connection import ConnectionHandle, Connector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundConfiguration:
    """
    What a data-access layer needs to build one context instance.

    The connection is borrowed: the configuration can ask for disposal but
    can never close the connection itself.
    """

    connection: ConnectionHandle
    _owner: ConnectionLifecycleController = field(repr=False, compare=False)
    options: ContextOptions = field(default_factory=ContextOptions)
    log_sink: LogTarget | None = None

    @property
    def lifecycle(self) -> ConnectionLifecycleController:
        return self._owner

    def emit_log(
        self, message: str, level: int = logging.INFO, event: str = DEFAULT_EVENT
    ) -> None:
        """Log hook: capture one raw message for one executed operation."""
        if self.log_sink is None:
            return
        self.log_sink.record(LogRecord(raw_message=message, level=level, event=event))

    def request_dispose(self) -> None:
        """Context-instance teardown; the controller decides what happens."""
        self._owner.request_dispose()


class ConnectionLifecycleController:
    """
    Owns one ephemeral connection and its disposal mode.

    Transitions are delegated to the pure functions in
    ``dbtestsupport.domain.disposal``; this class only applies them and
    performs the actual release.
    """

    def __init__(
        self,
        settings: HarnessSettings | None = None,
        connector: Connector | None = None,
    ) -> None:
        """
        Initialize the controller. No connection is opened until create().

        Args:
            settings: Connection settings (defaults to an in-memory database)
            connector: Callable opening the sqlite3 connection (for tests)
        """
        self.settings = settings or HarnessSettings()
        self._connector = connector
        self._handle: ConnectionHandle | None = None
        self._mode = DisposalMode.AUTO
        self._configurations_issued = 0

    # ========================================================================
    # State
    # ========================================================================

    @property
    def mode(self) -> DisposalMode:
        return self._mode

    @property
    def is_released(self) -> bool:
        return self._mode is DisposalMode.RELEASED

    @property
    def handle(self) -> ConnectionHandle | None:
        return self._handle

    @property
    def configurations_issued(self) -> int:
        return self._configurations_issued

    def _resource(self) -> str:
        if self._handle is not None:
            return self._handle.description
        return f"({self.settings.database})"

    def _guard(self, operation: str) -> None:
        if self._mode is DisposalMode.RELEASED:
            logger.warning("%s called after release of %s", operation, self._resource())
            raise UseAfterReleaseError(operation, self._resource())

    # ========================================================================
    # Operations
    # ========================================================================

    def create(
        self,
        log_sink: LogTarget | None = None,
        options: ContextOptions | None = None,
    ) -> BoundConfiguration:
        """
        Obtain or open the shared connection and bind a configuration to it.

        The first call opens the connection and sets the mode to AUTO; later
        calls bind further configurations to the same one and keep the mode.

        Raises:
            ConnectionInitError: If the engine cannot open the connection
            UseAfterReleaseError: If the connection was already released
        """
        self._guard("create")
        if self._handle is None:
            self._handle = ConnectionHandle.open(self.settings, self._connector)
            self._mode = DisposalMode.AUTO
            logger.info(
                "Opened %s connection %s",
                "ephemeral" if self.settings.is_ephemeral else "file",
                self._handle.description,
            )

        if options is None:
            options = ContextOptions(command_timeout=self.settings.command_timeout)

        self._configurations_issued += 1
        return BoundConfiguration(
            connection=self._handle,
            _owner=self,
            options=options,
            log_sink=log_sink,
        )

    def request_dispose(self) -> None:
        """
        Handle one context-instance teardown.

        AUTO releases; SKIP_NEXT_DISPOSE suppresses once and returns to AUTO;
        HELD_INDEFINITELY suppresses; RELEASED (or nothing opened) is a no-op.
        """
        if self._handle is None and self._mode.is_live():
            logger.debug("Dispose requested before any connection was opened")
            return

        decision = on_dispose_requested(self._mode)
        if decision.release:
            self._release(decision.description)
        else:
            logger.debug(
                "Dispose of %s: %s", self._resource(), decision.description
            )
        self._mode = decision.next_mode

    def stop_next_dispose(self) -> None:
        """Suppress exactly one upcoming dispose (repeat calls do not stack)."""
        self._apply("stop_next_dispose", on_stop_next_dispose)

    def turn_off_dispose(self) -> None:
        """Suppress every dispose until manual_dispose()."""
        self._apply("turn_off_dispose", on_turn_off_dispose)

    def manual_dispose(self) -> None:
        """Release the connection now, whatever the mode."""
        self._guard("manual_dispose")
        decision = on_manual_dispose(self._mode)
        self._release(decision.description)
        self._mode = decision.next_mode

    def _apply(self, operation: str, transition) -> None:
        self._guard(operation)
        new_mode = transition(self._mode)
        if new_mode is not self._mode:
            logger.debug("%s: %s -> %s", operation, self._mode.value, new_mode.value)
        self._mode = new_mode

    def _release(self, reason: str) -> None:
        if self._handle is not None:
            self._handle._release()
            logger.info("Connection %s %s", self._handle.description, reason)

    # ========================================================================
    # Context manager
    # ========================================================================

    def __enter__(self) -> ConnectionLifecycleController:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._mode.is_live():
            self.manual_dispose()
        # Do not suppress exceptions
        return False

    def __repr__(self) -> str:
        return (
            f"<ConnectionLifecycleController {self._resource()} mode={self._mode.value}>"
        )


def create_lifecycle_controller(
    settings: HarnessSettings | None = None,
    connector: Connector | None = None,
) -> ConnectionLifecycleController:
    """Create a controller for a fresh ephemeral database."""
    return ConnectionLifecycleController(settings=settings, connector=connector)
