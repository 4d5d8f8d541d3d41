"""Shared serialization helpers for camelCase conversion.

Provides the ``snake_to_camel`` alias generator used by every
Pydantic model that is returned to the presentation layer.
"""

from __future__ import annotations


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"privacy_score"``.

    Returns:
        The camelCase equivalent, e.g. ``"privacyScore"``.
    """
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
