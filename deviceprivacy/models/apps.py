"""Pydantic models for discovered applications and their scored views."""

from __future__ import annotations

import pydantic

from deviceprivacy.utils.serialization import snake_to_camel


class ApplicationRecord(pydantic.BaseModel):
    """An application found by a discovery adapter.

    ``path`` is the application's identity: the deduplicator keys
    on the name, the score cache keys on a fingerprint of the path.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    name: str = pydantic.Field(min_length=1)
    path: str = pydantic.Field(min_length=1)
    platform_metadata: dict[str, str] = pydantic.Field(default_factory=dict)


class PermissionDetailView(pydantic.BaseModel):
    """One permission row as shown to the presentation layer."""

    name: str
    description: str
    score: int


class ScoredApplication(pydantic.BaseModel):
    """An application with its privacy score attached."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    name: str
    path: str
    permissions: list[str] = pydantic.Field(default_factory=list)
    privacy_score: int = 0
    permission_details: list[PermissionDetailView] = pydantic.Field(
        default_factory=list
    )


class TierSummary(pydantic.BaseModel):
    """Number of applications in each risk tier."""

    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0
