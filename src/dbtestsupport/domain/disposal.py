"""
Disposal state machine for the connection lifecycle controller.

This module is the single source of truth for how a shared ephemeral
connection reacts to dispose requests and to the explicit mode operations.

Architecture Note:
    - Pure domain logic - no I/O, no connection objects
    - The controller applies these results; it never decides on its own
    - RELEASED is terminal: no transition leaves it
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DisposalMode(str, Enum):
    """
    How the controller treats the next dispose request.

    AUTO and SKIP_NEXT_DISPOSE flip between each other; HELD_INDEFINITELY
    lasts until a manual dispose; RELEASED is the terminal state.
    """

    AUTO = "auto"  # Next dispose releases the connection
    SKIP_NEXT_DISPOSE = "skip_next_dispose"  # Suppress exactly one dispose
    HELD_INDEFINITELY = "held_indefinitely"  # Suppress until manual dispose
    RELEASED = "released"  # Terminal

    def is_live(self) -> bool:
        """True while the connection is still open."""
        return self is not DisposalMode.RELEASED


@dataclass(frozen=True)
class DisposeDecision:
    """
    Result of classifying a dispose request.

    Attributes:
        release: Whether the connection must be closed now
        next_mode: Mode the controller moves to
        description: Short human-readable reason (used for logging)
    """

    release: bool
    next_mode: DisposalMode
    description: str = ""


class InvalidTransition(ValueError):
    """Raised when an explicit mode operation is applied to RELEASED."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} is not valid once the connection is released")


# =============================================================================
# Transitions
# =============================================================================


def on_dispose_requested(mode: DisposalMode) -> DisposeDecision:
    """
    Classify one context-instance teardown.

    Rules:
        AUTO              -> release, RELEASED
        SKIP_NEXT_DISPOSE -> suppressed, back to AUTO
        HELD_INDEFINITELY -> suppressed, stays held
        RELEASED          -> nothing to do
    """
    if mode is DisposalMode.AUTO:
        return DisposeDecision(True, DisposalMode.RELEASED, "released on dispose")
    if mode is DisposalMode.SKIP_NEXT_DISPOSE:
        return DisposeDecision(False, DisposalMode.AUTO, "one dispose suppressed")
    if mode is DisposalMode.HELD_INDEFINITELY:
        return DisposeDecision(
            False, DisposalMode.HELD_INDEFINITELY, "dispose suppressed (held)"
        )
    return DisposeDecision(False, DisposalMode.RELEASED, "already released")


def on_stop_next_dispose(mode: DisposalMode) -> DisposalMode:
    """
    Suppress exactly one upcoming dispose.

    Only AUTO moves. Repeating the call while already suppressing does not
    stack: one suppressed dispose regardless of how many calls were made.
    """
    if mode is DisposalMode.RELEASED:
        raise InvalidTransition("stop_next_dispose")
    if mode is DisposalMode.AUTO:
        return DisposalMode.SKIP_NEXT_DISPOSE
    return mode


def on_turn_off_dispose(mode: DisposalMode) -> DisposalMode:
    """Hold the connection open until a manual dispose."""
    if mode is DisposalMode.RELEASED:
        raise InvalidTransition("turn_off_dispose")
    return DisposalMode.HELD_INDEFINITELY


def on_manual_dispose(mode: DisposalMode) -> DisposeDecision:
    """Force a release whatever the current mode."""
    if mode is DisposalMode.RELEASED:
        raise InvalidTransition("manual_dispose")
    return DisposeDecision(True, DisposalMode.RELEASED, "released manually")
