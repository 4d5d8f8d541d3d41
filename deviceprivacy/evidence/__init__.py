"""Evidence sources and the per-platform source selection."""

from __future__ import annotations

from typing import Literal

from deviceprivacy.evidence.base import CombinedEvidenceSource, EvidenceChain, EvidenceSource
from deviceprivacy.evidence.entitlements import EntitlementReader
from deviceprivacy.evidence.imports import ImportedLibraryReader
from deviceprivacy.evidence.manifest import ManifestCapabilityReader
from deviceprivacy.evidence.plist import PlistUsageKeyReader

Platform = Literal["windows", "mac"]


def for_platform(platform: str) -> EvidenceSource:
    """Build the evidence source used for *platform*.

    Windows tries the package manifest first and falls back to the
    executable's import table.  macOS reads Info.plist usage keys and
    adds code-signing entitlements when available.

    Raises:
        ValueError: If *platform* is not ``"windows"`` or ``"mac"``.
    """
    if platform == "windows":
        return EvidenceChain([ManifestCapabilityReader(), ImportedLibraryReader()])
    if platform == "mac":
        return CombinedEvidenceSource(PlistUsageKeyReader(), EntitlementReader())
    raise ValueError(f"Unsupported platform: {platform}")


__all__ = [
    "CombinedEvidenceSource",
    "EntitlementReader",
    "EvidenceChain",
    "EvidenceSource",
    "ImportedLibraryReader",
    "ManifestCapabilityReader",
    "Platform",
    "PlistUsageKeyReader",
    "for_platform",
]
