"""
Log capture endpoints.

A LogSink is the append-only list a test hands to the context factory. The
data layer's log hook appends one LogRecord per operation; the test reads the
entries back for decoding and assertions.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Protocol, runtime_checkable

from dbtestsupport.domain.log_record import LogRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class LogTarget(Protocol):
    """Anything that can receive captured records."""

    def record(self, entry: LogRecord) -> None:
        """Receive one captured record."""
        ...


class LogSink:
    """
    Ordered, append-only capture of log records.

    Appends are serialised with a lock, so records written from several
    threads are neither lost nor interleaved. Reads return a snapshot.

    Usage:
        sink = LogSink()
        config = TestContextFactory().build(controller, sink)
        ...
        decoded = SqlDecoder().decode(sink.last())
    """

    def __init__(self) -> None:
        self._entries: list[LogRecord] = []
        self._lock = threading.Lock()

    def record(self, entry: LogRecord) -> None:
        """Append one record, preserving arrival order."""
        with self._lock:
            self._entries.append(entry)

    @property
    def entries(self) -> tuple[LogRecord, ...]:
        """Snapshot of everything captured so far, oldest first."""
        with self._lock:
            return tuple(self._entries)

    def clear(self) -> None:
        """Drop everything captured so far (e.g. between test phases)."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.debug("LogSink cleared (%d records dropped)", dropped)

    def last(self) -> LogRecord:
        """Most recent record; IndexError when nothing was captured."""
        with self._lock:
            if not self._entries:
                raise IndexError("LogSink is empty")
            return self._entries[-1]

    def messages(self) -> list[str]:
        """Raw messages of all captured records."""
        return [entry.raw_message for entry in self.entries]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self.entries)


class CallbackLogSink:
    """Forwards each raw message to a plain ``Callable[[str], None]``."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self._callback = callback

    def record(self, entry: LogRecord) -> None:
        self._callback(entry.raw_message)


class LogSinkHandler(logging.Handler):
    """
    Bridge from stdlib ``logging`` into a LogSink.

    Attach it to the logger a data layer writes its commands to:

        handler = LogSinkHandler(sink)
        logging.getLogger("myapp.sql").addHandler(handler)
    """

    def __init__(self, sink: LogTarget, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink.record(LogRecord.from_logging(record))
        except Exception:
            self.handleError(record)
