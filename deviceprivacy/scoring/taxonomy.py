"""Permission taxonomy: raw evidence token to canonical permission.

Every evidence source emits opaque string tokens.  The taxonomy is
the only place they acquire meaning: an exact-match table maps each
known token to a canonical permission id, and a second table maps
canonical ids to a description and base weight.  Several tokens may
collapse into one canonical id (``NSPhotoLibraryUsageDescription``,
``uap:picturesLibrary`` and the photos entitlement all mean
``photo-library``).

Literal strings that could mean different things on different
platforms carry an origin prefix (``capability:``, ``device:``,
``uap:``, ``restricted:``, ``entitlement:``).  Plist usage keys and
lower-cased DLL names are unambiguous and stay bare.

The tables are built once and exposed read-only, so concurrent
scoring tasks can share one instance without locking.
"""

from __future__ import annotations

import types
from collections.abc import Mapping

from deviceprivacy.data import loader
from deviceprivacy.models import scoring
from deviceprivacy.utils import logger

log = logger.create_logger("Taxonomy")

# Origin prefixes for namespaced tokens.
CAPABILITY_PREFIX = "capability:"
DEVICE_PREFIX = "device:"
UAP_PREFIX = "uap:"
RESTRICTED_PREFIX = "restricted:"
ENTITLEMENT_PREFIX = "entitlement:"


class PermissionTaxonomy:
    """Immutable token -> PermissionDefinition lookup."""

    __slots__ = ("_definitions", "_tokens")

    def __init__(
        self,
        definitions: Mapping[str, scoring.PermissionDefinition],
        tokens: Mapping[str, str],
    ) -> None:
        """Build the taxonomy.

        Raises:
            ValueError: If a token maps to an undefined canonical id
                or a definition is keyed under the wrong id.
        """
        for key, definition in definitions.items():
            if key != definition.canonical_id:
                raise ValueError(f"Definition keyed as {key!r} has canonical id {definition.canonical_id!r}")
        dangling = sorted({cid for cid in tokens.values() if cid not in definitions})
        if dangling:
            raise ValueError(f"Tokens map to undefined permissions: {', '.join(dangling)}")

        self._definitions: Mapping[str, scoring.PermissionDefinition] = types.MappingProxyType(dict(definitions))
        self._tokens: Mapping[str, str] = types.MappingProxyType(dict(tokens))

    @property
    def definitions(self) -> Mapping[str, scoring.PermissionDefinition]:
        """Read-only view of canonical id -> definition."""
        return self._definitions

    @property
    def tokens(self) -> Mapping[str, str]:
        """Read-only view of raw token -> canonical id."""
        return self._tokens

    def resolve(self, raw_token: str) -> scoring.PermissionDefinition | None:
        """Return the definition for *raw_token*, or ``None`` if unknown.

        Lookup is exact: no case folding, no prefix guessing.
        """
        canonical_id = self._tokens.get(raw_token)
        if canonical_id is None:
            return None
        return self._definitions[canonical_id]

    def __contains__(self, raw_token: object) -> bool:
        return raw_token in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


def load_taxonomy() -> PermissionTaxonomy:
    """Build a taxonomy from the bundled JSON reference data."""
    taxonomy = PermissionTaxonomy(
        loader.load_permission_definitions(),
        loader.load_token_maps(),
    )
    log.debug(
        "Permission taxonomy loaded",
        {"tokens": len(taxonomy.tokens), "permissions": len(taxonomy.definitions)},
    )
    return taxonomy


_taxonomy: PermissionTaxonomy | None = None


def get_taxonomy() -> PermissionTaxonomy:
    """Get the process-wide taxonomy (lazy loaded and cached)."""
    global _taxonomy
    if _taxonomy is None:
        _taxonomy = load_taxonomy()
    return _taxonomy
