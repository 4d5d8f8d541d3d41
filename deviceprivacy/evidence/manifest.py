"""Windows AppxManifest.xml capability reader.

Packaged (Store/MSIX) apps declare capabilities in
``AppxManifest.xml``.  The same literal can appear under different
elements with different meaning, so every token carries its origin:

- ``<Capability>`` (foundation namespace) → ``capability:``
- ``<DeviceCapability>`` → ``device:``
- ``<uap:Capability>`` (any uapN namespace) → ``uap:``
- ``<rescap:Capability>`` → ``restricted:``
"""

from __future__ import annotations

import asyncio
import pathlib
from xml.etree import ElementTree

from deviceprivacy.evidence.base import EvidenceSource
from deviceprivacy.models import apps
from deviceprivacy.scoring import taxonomy
from deviceprivacy.utils.errors import EvidenceUnavailableError

MANIFEST_NAME = "AppxManifest.xml"


def _split_tag(tag: str) -> tuple[str, str]:
    """Split ``{namespace}local`` into ``(namespace, local)``."""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace.lower(), local
    return "", tag


def _origin_prefix(namespace: str, local: str) -> str | None:
    if local == "DeviceCapability":
        return taxonomy.DEVICE_PREFIX
    if local != "Capability":
        return None
    if "restrictedcapabilities" in namespace:
        return taxonomy.RESTRICTED_PREFIX
    if "/uap" in namespace:
        return taxonomy.UAP_PREFIX
    return taxonomy.CAPABILITY_PREFIX


def parse_manifest(path: pathlib.Path) -> list[str]:
    """Return origin-prefixed capability tokens declared in *path*.

    Raises:
        EvidenceUnavailableError: If the manifest cannot be parsed.
    """
    try:
        root = ElementTree.parse(path).getroot()
    except (OSError, ElementTree.ParseError) as exc:
        raise EvidenceUnavailableError("Could not read AppxManifest.xml") from exc

    tokens: list[str] = []
    for element in root.iter():
        if _split_tag(element.tag)[1] != "Capabilities":
            continue
        for child in element:
            prefix = _origin_prefix(*_split_tag(child.tag))
            name = child.get("Name")
            if prefix and name:
                tokens.append(f"{prefix}{name}")
    return tokens


class ManifestCapabilityReader(EvidenceSource):
    """Reads declared capabilities from a packaged app's manifest."""

    name = "appx-manifest"

    def supports(self, app: apps.ApplicationRecord) -> bool:
        return (pathlib.Path(app.path) / MANIFEST_NAME).is_file()

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        manifest = pathlib.Path(app.path) / MANIFEST_NAME
        if not manifest.is_file():
            raise EvidenceUnavailableError("AppxManifest.xml not found")
        return await asyncio.to_thread(parse_manifest, manifest)
