"""Pydantic models for the permission taxonomy and score results."""

from __future__ import annotations

import pydantic

from deviceprivacy.utils.serialization import snake_to_camel

# Reserved canonical ids for results that carry no real permission.
NO_PERMISSIONS_ID = "no-permissions"
EXTRACTION_ERROR_ID = "extraction-error"
UNCLASSIFIED_PREFIX = "unclassified:"


class PermissionDefinition(pydantic.BaseModel):
    """A canonical permission with its description and base weight."""

    model_config = pydantic.ConfigDict(frozen=True)

    canonical_id: str = pydantic.Field(min_length=1)
    description: str
    base_weight: int = pydantic.Field(ge=0)


class PermissionDetail(pydantic.BaseModel):
    """One resolved permission contributing to a score."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True, frozen=True
    )

    canonical_id: str
    description: str
    weight: int = pydantic.Field(ge=0)
    source_token: str | None = None


class ScoreResult(pydantic.BaseModel):
    """Aggregate privacy score for one application.

    ``score`` is always ``min(100, sum(detail.weight))`` and
    ``permissions`` lists the detail descriptions in the same order.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True, frozen=True
    )

    score: int = pydantic.Field(ge=0, le=100)
    permissions: list[str] = pydantic.Field(default_factory=list)
    details: list[PermissionDetail] = pydantic.Field(default_factory=list)

    @property
    def is_inconclusive(self) -> bool:
        """True when the evidence source failed for this application."""
        return any(d.canonical_id == EXTRACTION_ERROR_ID for d in self.details)
