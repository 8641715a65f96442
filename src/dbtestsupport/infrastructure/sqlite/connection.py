"""
Ephemeral SQLite connection handle.

An in-memory SQLite database exists only while its connection stays open, so
the handle is the database. It deliberately has no public close operation:
the lifecycle controller that opened it is the only thing allowed to release
it. Uses stdlib sqlite3 with no ORM.
"""

from __future__ import annotations

import itertools
import logging
import sqlite3
from typing import Any, Callable

from dbtestsupport.domain.errors import ConnectionInitError
from dbtestsupport.domain.settings import HarnessSettings

logger = logging.getLogger(__name__)

Connector = Callable[[HarnessSettings], sqlite3.Connection]

_handle_ids = itertools.count(1)


def connect_sqlite(settings: HarnessSettings) -> sqlite3.Connection:
    """Open a sqlite3 connection configured from settings."""
    connection = sqlite3.connect(
        settings.database,
        timeout=settings.command_timeout,
        isolation_level=settings.isolation_level,
        uri=settings.uri,
    )
    if settings.foreign_keys:
        connection.execute("PRAGMA foreign_keys = ON")
    # Use Row factory for dict-like access
    connection.row_factory = sqlite3.Row
    return connection


class ConnectionHandle:
    """
    One open connection to the ephemeral database.

    Data-access layers borrow it through a BoundConfiguration and use the
    query methods below. Releasing it is the controller's job.
    """

    def __init__(self, connection: sqlite3.Connection, database: str) -> None:
        self._connection: sqlite3.Connection | None = connection
        self.database = database
        self.handle_id = next(_handle_ids)

    @classmethod
    def open(
        cls, settings: HarnessSettings, connector: Connector | None = None
    ) -> ConnectionHandle:
        """
        Open a new handle.

        Raises:
            ConnectionInitError: If the engine cannot open the connection
        """
        connector = connector or connect_sqlite
        try:
            connection = connector(settings)
        except (sqlite3.Error, OSError) as e:
            logger.error("Could not open connection to %s: %s", settings.database, e)
            raise ConnectionInitError(settings.database, str(e)) from e
        handle = cls(connection, settings.database)
        logger.debug("Opened %s", handle.description)
        return handle

    @property
    def description(self) -> str:
        return f"#{self.handle_id} ({self.database})"

    @property
    def closed(self) -> bool:
        return self._connection is None

    def _live(self) -> sqlite3.Connection:
        if self._connection is None:
            raise sqlite3.ProgrammingError(
                f"Cannot operate on released connection {self.description}"
            )
        return self._connection

    def execute(self, sql: str, parameters: Any = ()) -> sqlite3.Cursor:
        return self._live().execute(sql, parameters)

    def commit(self) -> None:
        self._live().commit()

    def rollback(self) -> None:
        self._live().rollback()

    def _release(self) -> None:
        """Close the connection. Only the lifecycle controller calls this."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("Closed %s", self.description)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<ConnectionHandle {self.description} {state}>"
