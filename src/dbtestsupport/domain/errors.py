"""
Error kinds raised by dbtestsupport.

Every error is raised synchronously at the call that detects it and is never
retried: all operations are local and deterministic.
"""

from __future__ import annotations


class DbTestSupportError(Exception):
    """Base class for all dbtestsupport errors."""


class ConnectionInitError(DbTestSupportError):
    """The engine could not open the ephemeral database connection."""

    def __init__(self, database: str, reason: str) -> None:
        self.database = database
        self.reason = reason
        super().__init__(
            f"create: could not open ephemeral connection to '{database}': {reason}"
        )


class UseAfterReleaseError(DbTestSupportError):
    """A lifecycle operation was invoked after the connection was released."""

    def __init__(self, operation: str, resource: str) -> None:
        self.operation = operation
        self.resource = resource
        super().__init__(
            f"{operation}: connection {resource} has already been released"
        )


class DecodeError(DbTestSupportError):
    """Base class for failures while decoding a captured log message."""


class UnresolvedPlaceholderError(DecodeError):
    """The statement template references a placeholder with no declaration."""

    def __init__(self, placeholder: str) -> None:
        self.placeholder = placeholder
        super().__init__(
            f"decode: placeholder '{placeholder}' has no matching parameter declaration"
        )


class ParameterFormatError(DecodeError):
    """A parameter declaration could not be turned into a literal."""

    def __init__(self, name: str, type_tag: str, value: str, reason: str) -> None:
        self.name = name
        self.type_tag = type_tag
        self.value = value
        tag = f" (Type = {type_tag})" if type_tag else ""
        super().__init__(f"decode: parameter '{name}'{tag} value {value!r}: {reason}")
