"""macOS Info.plist usage-description reader.

An app bundle declares each protected resource it may request with an
``NS…UsageDescription`` key in ``Contents/Info.plist``.  The keys
themselves are the evidence tokens.
"""

from __future__ import annotations

import asyncio
import pathlib
import plistlib
from typing import Any
from xml.parsers import expat

from deviceprivacy.evidence.base import EvidenceSource
from deviceprivacy.models import apps
from deviceprivacy.utils.errors import EvidenceUnavailableError

USAGE_KEY_SUFFIX = "UsageDescription"


def info_plist_path(bundle: str | pathlib.Path) -> pathlib.Path:
    return pathlib.Path(bundle) / "Contents" / "Info.plist"


def read_info_plist(bundle: str | pathlib.Path) -> dict[str, Any] | None:
    """Load a bundle's Info.plist (XML or binary), or ``None`` if unreadable."""
    try:
        with open(info_plist_path(bundle), "rb") as fh:
            data = plistlib.load(fh)
    except (OSError, plistlib.InvalidFileException, expat.ExpatError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def is_app_bundle(path: str) -> bool:
    return path.rstrip("/").lower().endswith(".app")


class PlistUsageKeyReader(EvidenceSource):
    """Reads ``NS…UsageDescription`` keys from an app bundle."""

    name = "plist-usage-keys"

    def supports(self, app: apps.ApplicationRecord) -> bool:
        return is_app_bundle(app.path)

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        if not is_app_bundle(app.path):
            raise EvidenceUnavailableError("Not a Mac application bundle (.app)")
        if not pathlib.Path(app.path).exists():
            raise EvidenceUnavailableError("Application path does not exist")

        plist = await asyncio.to_thread(read_info_plist, app.path)
        if plist is None:
            raise EvidenceUnavailableError("Could not read Info.plist file")

        return [
            key
            for key, value in plist.items()
            if isinstance(key, str) and key.endswith(USAGE_KEY_SUFFIX) and value
        ]
