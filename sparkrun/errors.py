"""
Error types for sparkrun.

Errors carry an ErrorKind so callers can decide how to report them
without matching on exception classes or message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of resolution errors."""

    ENDPOINT_INVALID = "endpoint_invalid"
    DISCOVERY_FETCH_FAILED = "discovery_fetch_failed"
    DISCOVERY_PERSIST_FAILED = "discovery_persist_failed"


class SparkRunError(Exception):
    """Base class for all sparkrun errors."""

    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.kind = kind

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": str(self)}


class EndpointValidationError(SparkRunError, ValueError):
    """
    Raised when a run configuration's schema + url is not a valid URI.

    Attributes:
        text: The concatenated URI text that failed to parse
        reason: Short description of what is wrong with it
    """

    def __init__(self, text: str, reason: str):
        super().__init__(f"Invalid engine URL '{text}': {reason}", ErrorKind.ENDPOINT_INVALID)
        self.text = text
        self.reason = reason


class DiscoveryConfigError(SparkRunError):
    """
    Raised when the discovery configuration cannot be fetched or persisted.

    The underlying OSError is chained as __cause__.
    """

    def __init__(self, key: str, kind: ErrorKind, detail: str = ""):
        action = "persist" if kind == ErrorKind.DISCOVERY_PERSIST_FAILED else "fetch"
        message = f"Failed to {action} configuration '{key}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, kind)
        self.key = key
