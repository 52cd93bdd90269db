"""
Error types raised by the learning core.

Every error here is recoverable at the session-manager boundary; none of
them should take the process down.
"""

from __future__ import annotations

from typing import Any


class LexiconError(Exception):
    """Base class for all trainer errors."""


class ValidationError(LexiconError):
    """Malformed input (unknown mode, empty corpus, bad word id, ...)."""


class SessionStateError(ValidationError):
    """Operation is not valid in the current session/test state."""


class PersistenceError(LexiconError):
    """A storage collaborator call failed.

    The in-memory effect of the triggering action is kept; the caller
    decides whether to repeat it.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class ExhaustionError(LexiconError):
    """Fewer items were available than requested.

    Not a hard failure: ``partial`` carries whatever could be produced.
    """

    def __init__(self, requested: int, available: int, partial: list[Any] | None = None):
        super().__init__(f"requested {requested} items but only {available} available")
        self.requested = requested
        self.available = available
        self.partial = partial or []
