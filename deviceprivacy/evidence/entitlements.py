"""macOS code-signing entitlement reader.

Runs ``codesign -d --entitlements :- <executable>`` against the
bundle's main executable and turns the privacy-relevant entitlement
keys into ``entitlement:``-prefixed tokens.  Unsigned apps simply
have no entitlements; the combined mac source treats that as
"nothing extra", not as a failure.
"""

from __future__ import annotations

import asyncio
import pathlib
import plistlib
from xml.parsers import expat

from deviceprivacy.evidence.base import EvidenceSource
from deviceprivacy.evidence.plist import is_app_bundle, read_info_plist
from deviceprivacy.models import apps
from deviceprivacy.scoring.taxonomy import ENTITLEMENT_PREFIX
from deviceprivacy.utils.errors import EvidenceUnavailableError

CODESIGN = "codesign"

# Only entitlement families that gate user data or devices.
RELEVANT_PREFIXES: tuple[str, ...] = (
    "com.apple.security.device.",
    "com.apple.security.personal-information.",
    "com.apple.security.network.",
    "com.apple.security.files.",
)


def main_executable(bundle: str | pathlib.Path) -> pathlib.Path | None:
    """Locate the bundle's main executable.

    Uses ``CFBundleExecutable`` when the plist names one, else the
    first file in ``Contents/MacOS``.
    """
    macos_dir = pathlib.Path(bundle) / "Contents" / "MacOS"
    plist = read_info_plist(bundle) or {}
    name = plist.get("CFBundleExecutable")
    if isinstance(name, str) and name and (macos_dir / name).is_file():
        return macos_dir / name
    try:
        files = sorted(p for p in macos_dir.iterdir() if p.is_file())
    except OSError:
        return None
    return files[0] if files else None


def parse_entitlements(output: bytes) -> list[str]:
    """Extract relevant entitlement tokens from codesign's XML output."""
    start = output.find(b"<?xml")
    if start < 0:
        return []
    try:
        data = plistlib.loads(output[start:])
    except (plistlib.InvalidFileException, expat.ExpatError, ValueError):
        return []
    if not isinstance(data, dict):
        return []
    return [
        f"{ENTITLEMENT_PREFIX}{key}"
        for key, value in data.items()
        if isinstance(key, str) and key.startswith(RELEVANT_PREFIXES) and value
    ]


class EntitlementReader(EvidenceSource):
    """Reads privacy-relevant entitlements from a signed app bundle."""

    name = "entitlements"

    def supports(self, app: apps.ApplicationRecord) -> bool:
        return is_app_bundle(app.path)

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        executable = await asyncio.to_thread(main_executable, app.path)
        if executable is None:
            raise EvidenceUnavailableError("No main executable in bundle")

        try:
            proc = await asyncio.create_subprocess_exec(
                CODESIGN, "-d", "--entitlements", ":-", str(executable),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise EvidenceUnavailableError("codesign is not available") from exc

        stdout, _ = await proc.communicate()
        if proc.returncode != 0:
            raise EvidenceUnavailableError("Executable is not signed")
        return parse_entitlements(stdout)
