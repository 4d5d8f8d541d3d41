"""macOS application discovery: ``.app`` bundles in the standard folders."""

from __future__ import annotations

import pathlib
from collections.abc import Iterable

from deviceprivacy.evidence.plist import read_info_plist
from deviceprivacy.models import apps
from deviceprivacy.utils import logger

log = logger.create_logger("Discovery")


def default_application_directories() -> list[pathlib.Path]:
    return [
        pathlib.Path("/Applications"),
        pathlib.Path("/System/Applications"),
        pathlib.Path.home() / "Applications",
    ]


def _bundle_metadata(bundle: pathlib.Path) -> dict[str, str]:
    plist = read_info_plist(bundle) or {}
    version = plist.get("CFBundleShortVersionString") or plist.get("CFBundleVersion") or "Unknown"
    bundle_id = plist.get("CFBundleIdentifier") or "Unknown"
    return {"version": str(version), "bundleId": str(bundle_id)}


def bundle_apps(directories: Iterable[pathlib.Path] | None = None) -> list[apps.ApplicationRecord]:
    """Depth-1 ``*.app`` bundles in each of *directories*.

    Missing or unreadable directories are skipped.
    """
    records: list[apps.ApplicationRecord] = []
    for directory in directories if directories is not None else default_application_directories():
        try:
            bundles = sorted(p for p in directory.iterdir() if p.suffix == ".app" and p.is_dir())
        except OSError:
            log.info("Application directory not accessible", {"path": str(directory)})
            continue
        for bundle in bundles:
            records.append(
                apps.ApplicationRecord(
                    name=bundle.stem,
                    path=str(bundle),
                    platform_metadata=_bundle_metadata(bundle),
                )
            )
    return records
