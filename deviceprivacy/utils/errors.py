"""
Error types and helpers for the scan engine.

None of these errors escape the engine: evidence failures are turned
into ``Evidence.unavailable`` results and malformed records are dropped
by the registry.  They exist so that each boundary can catch exactly
the condition it owns.
"""

from __future__ import annotations


class EvidenceUnavailableError(Exception):
    """An evidence source could not produce tokens for an application.

    Raised for a missing manifest, an unreadable binary or missing
    bundle metadata.
    """


class MalformedRecordError(ValueError):
    """An application record is missing a usable name or path."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Falls back to the exception class name when the message is empty.
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"
