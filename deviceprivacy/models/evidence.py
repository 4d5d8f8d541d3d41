"""Typed result returned by every evidence source."""

from __future__ import annotations

import pydantic


class Evidence(pydantic.BaseModel):
    """Capability evidence for one application, or the reason there is none.

    A source that ran successfully but found nothing returns ``ok``
    evidence with no tokens; a source that could not run returns an
    ``error``.  The scorer reports those two cases differently.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    source: str
    tokens: list[str] = pydantic.Field(default_factory=list)
    error: str | None = None
    # Weight for tokens the taxonomy does not know; None defers to settings.
    unknown_token_weight: int | None = pydantic.Field(default=None, ge=0)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def found(
        cls,
        source: str,
        tokens: list[str],
        unknown_token_weight: int | None = None,
    ) -> Evidence:
        """Build successful evidence."""
        return cls(source=source, tokens=list(tokens), unknown_token_weight=unknown_token_weight)

    @classmethod
    def unavailable(cls, source: str, reason: str) -> Evidence:
        """Build failed evidence carrying *reason*."""
        return cls(source=source, error=reason or "Evidence unavailable")
