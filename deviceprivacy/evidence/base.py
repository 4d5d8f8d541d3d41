"""Evidence source abstraction.

Every extractor (plist keys, manifest capabilities, PE imports,
entitlements) subclasses :class:`EvidenceSource` and implements
:meth:`extract`, which returns tokens or raises
``EvidenceUnavailableError``.  Callers only ever use :meth:`collect`,
which turns every failure into a typed ``Evidence.unavailable``
result so that scoring can degrade instead of crash.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence

from deviceprivacy.models import apps, evidence
from deviceprivacy.utils import logger
from deviceprivacy.utils.errors import EvidenceUnavailableError, get_error_message

log = logger.create_logger("Evidence")


class EvidenceSource(abc.ABC):
    """A fallible producer of evidence tokens for one application."""

    name: str = "evidence"
    # Weight for tokens the taxonomy does not know; None defers to settings.
    unknown_token_weight: int | None = None

    def supports(self, app: apps.ApplicationRecord) -> bool:
        """Whether this source can say anything about *app*."""
        return True

    @abc.abstractmethod
    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        """Return evidence tokens for *app*.

        Raises:
            EvidenceUnavailableError: When the evidence cannot be read.
        """

    async def collect(self, app: apps.ApplicationRecord) -> evidence.Evidence:
        """Run :meth:`extract` and wrap the outcome.  Never raises."""
        try:
            tokens = await self.extract(app)
        except EvidenceUnavailableError as exc:
            log.debug("Evidence unavailable", {"source": self.name, "path": app.path, "reason": str(exc)})
            return evidence.Evidence.unavailable(self.name, get_error_message(exc))
        except Exception as exc:
            log.warn("Evidence source failed", {"source": self.name, "path": app.path, "error": get_error_message(exc)})
            return evidence.Evidence.unavailable(self.name, f"Failed to analyse app permissions: {get_error_message(exc)}")
        return evidence.Evidence.found(self.name, tokens, self.unknown_token_weight)


class CombinedEvidenceSource(EvidenceSource):
    """A primary source plus best-effort supplementary sources.

    The primary decides success: if it fails, the result is its
    failure.  Supplementary sources only add tokens; their failures
    are logged and ignored.
    """

    def __init__(self, primary: EvidenceSource, *supplementary: EvidenceSource) -> None:
        self.primary = primary
        self.supplementary = supplementary
        self.name = "+".join(s.name for s in (primary, *supplementary))
        self.unknown_token_weight = primary.unknown_token_weight

    def supports(self, app: apps.ApplicationRecord) -> bool:
        return self.primary.supports(app)

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        tokens = list(await self.primary.extract(app))
        for source in self.supplementary:
            if not source.supports(app):
                continue
            extra = await source.collect(app)
            if extra.ok:
                tokens.extend(extra.tokens)
            else:
                log.debug("Supplementary evidence skipped", {"source": source.name, "reason": extra.error})
        return tokens


class EvidenceChain(EvidenceSource):
    """Delegates to the first source that supports the application."""

    def __init__(self, sources: Sequence[EvidenceSource]) -> None:
        self.sources = tuple(sources)
        self.name = "|".join(s.name for s in self.sources) or "chain"

    def select(self, app: apps.ApplicationRecord) -> EvidenceSource | None:
        return next((s for s in self.sources if s.supports(app)), None)

    def supports(self, app: apps.ApplicationRecord) -> bool:
        return self.select(app) is not None

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        source = self.select(app)
        if source is None:
            raise EvidenceUnavailableError("No evidence source supports this application")
        return await source.extract(app)

    async def collect(self, app: apps.ApplicationRecord) -> evidence.Evidence:
        source = self.select(app)
        if source is None:
            return evidence.Evidence.unavailable(self.name, "No evidence source supports this application")
        return await source.collect(app)
