"""Installed-application discovery for each supported platform."""

from __future__ import annotations

from deviceprivacy import registry
from deviceprivacy.discovery import mac, windows
from deviceprivacy.models import apps
from deviceprivacy.utils import logger

log = logger.create_logger("Discovery")


def discover_installed_apps(platform: str) -> list[apps.ApplicationRecord]:
    """Run every discovery adapter for *platform* and merge the results.

    Raises:
        ValueError: If *platform* is not ``"windows"`` or ``"mac"``.
    """
    log.start_timer(f"discover-{platform}")
    if platform == "windows":
        batches = [
            ("registry", windows.registry_apps()),
            ("programs", windows.program_directory_apps()),
            ("store", windows.store_apps()),
        ]
    elif platform == "mac":
        batches = [("bundles", mac.bundle_apps())]
    else:
        raise ValueError(f"Unsupported platform: {platform}")

    merged = registry.merge(batches)
    log.end_timer(f"discover-{platform}", f"Discovered {len(merged)} {platform} applications")
    return merged


__all__ = ["discover_installed_apps"]
