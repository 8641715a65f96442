"""
Captured log records and decoded statements.

Both types are immutable value objects: a LogRecord never changes after the
sink receives it, and a DecodedStatement is derived fresh on every decode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

DEFAULT_EVENT = "Executed DbCommand"


@dataclass(frozen=True)
class LogRecord:
    """
    Raw message captured for one data-access operation.

    Attributes:
        raw_message: Full multi-line message as emitted by the data layer
        level: Logging level the message was emitted at
        event: Name of the data-layer event that produced it
        logger_name: Originating logger, when captured through ``logging``
    """

    raw_message: str
    level: int = logging.INFO
    event: str = DEFAULT_EVENT
    logger_name: str | None = None

    @classmethod
    def from_logging(cls, record: logging.LogRecord) -> LogRecord:
        """Build a record from a stdlib ``logging.LogRecord``."""
        return cls(
            raw_message=record.getMessage(),
            level=record.levelno,
            event=getattr(record, "event", DEFAULT_EVENT),
            logger_name=record.name,
        )

    def __str__(self) -> str:
        return self.raw_message


@dataclass(frozen=True)
class DecodedStatement:
    """Literal statement text, one trimmed line per template line."""

    statement_lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.statement_lines)

    def __str__(self) -> str:
        return self.text

    def __iter__(self) -> Iterator[str]:
        return iter(self.statement_lines)

    def __len__(self) -> int:
        return len(self.statement_lines)

    def __getitem__(self, index: int) -> str:
        return self.statement_lines[index]
