"""Engine exceptions."""

from __future__ import annotations


class TapperError(Exception):
    """Base class for all engine errors."""


class InvalidGoalError(TapperError):
    """A session was started with a tap goal below 1."""

    def __init__(self, goal: object) -> None:
        super().__init__(f"Session goal must be a whole number >= 1, got {goal!r}")
        self.goal = goal


class IllegalTransitionError(TapperError):
    """A session transition was called from a phase that doesn't allow it."""

    def __init__(self, operation: str, phase: object, detail: str = "") -> None:
        message = f"{operation}() is not allowed in phase {phase}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.operation = operation
        self.phase = phase


class CatalogUnavailableError(TapperError):
    """Catalog data is missing or invalid; no session can start without it."""
