"""Shared fixtures for the test suite."""

from __future__ import annotations

import pathlib
import plistlib
from collections.abc import Callable
from typing import Any
from unittest import mock

import pytest

from deviceprivacy.config import ScanSettings
from deviceprivacy.models import apps
from deviceprivacy.scoring import taxonomy as taxonomy_mod

# ── Core Objects ────────────────────────────────────────────────


@pytest.fixture()
def taxonomy() -> taxonomy_mod.PermissionTaxonomy:
    """The bundled permission taxonomy."""
    return taxonomy_mod.get_taxonomy()


@pytest.fixture()
def make_app() -> Callable[..., apps.ApplicationRecord]:
    """Factory for application records."""

    def _make(name: str = "Sample App", path: str = "C:/Apps/Sample", **metadata: str) -> apps.ApplicationRecord:
        return apps.ApplicationRecord(name=name, path=path, platform_metadata=metadata)

    return _make


@pytest.fixture()
def make_settings() -> Callable[..., ScanSettings]:
    """Build settings from an isolated environment."""

    def _make(**env: str) -> ScanSettings:
        with mock.patch.dict("os.environ", env, clear=True):
            return ScanSettings()

    return _make


@pytest.fixture()
def settings(make_settings: Callable[..., ScanSettings]) -> ScanSettings:
    """Default settings, unaffected by the caller's environment."""
    return make_settings()


# ── Filesystem Factories ────────────────────────────────────────


@pytest.fixture()
def make_bundle(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Create a fake ``.app`` bundle with an optional Info.plist."""

    def _make(
        name: str,
        plist: dict[str, Any] | None = None,
        *,
        root: pathlib.Path | None = None,
        fmt: plistlib.PlistFormat = plistlib.FMT_XML,
    ) -> pathlib.Path:
        bundle = (root or tmp_path) / f"{name}.app"
        contents = bundle / "Contents"
        contents.mkdir(parents=True)
        if plist is not None:
            with open(contents / "Info.plist", "wb") as fh:
                plistlib.dump(plist, fh, fmt=fmt)
        return bundle

    return _make


APPX_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<Package xmlns="http://schemas.microsoft.com/appx/manifest/foundation/windows10"
         xmlns:uap="http://schemas.microsoft.com/appx/manifest/uap/windows10"
         xmlns:rescap="http://schemas.microsoft.com/appx/manifest/foundation/windows10/restrictedcapabilities">
  <Identity Name="Contoso.PhotoEditor" Publisher="CN=Contoso" Version="1.0.0.0" />
  <Capabilities>
    <Capability Name="internetClient" />
    <uap:Capability Name="picturesLibrary" />
    <rescap:Capability Name="runFullTrust" />
    <DeviceCapability Name="webcam" />
  </Capabilities>
</Package>
"""


@pytest.fixture()
def packaged_app_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A package folder containing an AppxManifest.xml."""
    folder = tmp_path / "Contoso.PhotoEditor_1.0.0.0_x64__abc123"
    folder.mkdir()
    (folder / "AppxManifest.xml").write_text(APPX_MANIFEST, encoding="utf-8")
    return folder
