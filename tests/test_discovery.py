"""Tests for the discovery adapters and discover_installed_apps()."""

from __future__ import annotations

import sys
from unittest.mock import patch

import pytest

from deviceprivacy import discovery
from deviceprivacy.discovery import mac, windows
from deviceprivacy.models import apps


class TestProgramDirectoryApps:
    """Tests for program_directory_apps()."""

    def test_one_record_per_folder(self, tmp_path) -> None:
        (tmp_path / "Obsidian").mkdir()
        (tmp_path / "Obsidian" / "Obsidian.exe").write_bytes(b"MZ")
        (tmp_path / "Portable Tool").mkdir()
        (tmp_path / "stray.txt").write_text("x")

        records = windows.program_directory_apps(tmp_path)

        assert [r.name for r in records] == ["Obsidian", "Portable Tool"]
        assert records[0].path.endswith("Obsidian.exe")
        assert records[1].path == str(tmp_path / "Portable Tool")

    def test_missing_root(self, tmp_path) -> None:
        assert windows.program_directory_apps(tmp_path / "missing") == []


class TestStoreApps:
    """Tests for store_apps() and package_family_name()."""

    def test_package_folders(self, tmp_path) -> None:
        for name in (
            "SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0",
            "Microsoft.WindowsCalculator_11.2307.4.0_x64__8wekyb3d8bbwe",
            "Deleted",
        ):
            (tmp_path / name).mkdir()

        records = windows.store_apps(tmp_path)

        assert len(records) == 1
        assert records[0].name == "SpotifyMusic"
        assert records[0].platform_metadata == {"packageFamilyName": "SpotifyAB.SpotifyMusic_zpdnekdrzrea0"}

    def test_missing_root(self, tmp_path) -> None:
        assert windows.store_apps(tmp_path / "WindowsApps") == []

    @pytest.mark.parametrize(
        ("folder", "expected"),
        [
            ("SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0", "SpotifyAB.SpotifyMusic_zpdnekdrzrea0"),
            ("NoUnderscores", "NoUnderscores"),
        ],
    )
    def test_package_family_name(self, folder: str, expected: str) -> None:
        assert windows.package_family_name(folder) == expected


class TestRegistryApps:
    """Tests for registry_apps()."""

    @pytest.mark.skipif(sys.platform == "win32", reason="Only meaningful off Windows")
    def test_empty_off_windows(self) -> None:
        assert windows.registry_apps() == []


class TestBundleApps:
    """Tests for bundle_apps()."""

    def test_bundles_with_metadata(self, tmp_path, make_bundle) -> None:
        make_bundle("Slack", {"CFBundleIdentifier": "com.tinyspeck.slackmacgap", "CFBundleShortVersionString": "4.36"})
        make_bundle("Bare")
        (tmp_path / "NotAnApp").mkdir()

        records = mac.bundle_apps([tmp_path, tmp_path / "missing"])

        assert [r.name for r in records] == ["Bare", "Slack"]
        assert records[0].platform_metadata == {"version": "Unknown", "bundleId": "Unknown"}
        assert records[1].platform_metadata == {"version": "4.36", "bundleId": "com.tinyspeck.slackmacgap"}
        assert records[1].path == str(tmp_path / "Slack.app")

    def test_version_falls_back_to_bundle_version(self, tmp_path, make_bundle) -> None:
        make_bundle("Tool", {"CFBundleVersion": "1203"})
        assert mac.bundle_apps([tmp_path])[0].platform_metadata["version"] == "1203"


class TestDiscoverInstalledApps:
    """Tests for discover_installed_apps()."""

    def test_mac_results_merged(self) -> None:
        found = [
            apps.ApplicationRecord(name="Slack", path="/Applications/Slack.app"),
            apps.ApplicationRecord(name="Slack", path="/Users/me/Applications/Slack.app"),
            apps.ApplicationRecord(name="Calculator", path="/System/Applications/Calculator.app"),
        ]
        with patch.object(mac, "bundle_apps", return_value=found):
            merged = discovery.discover_installed_apps("mac")
        assert [r.path for r in merged] == ["/Applications/Slack.app"]

    def test_windows_sources_combined(self) -> None:
        with (
            patch.object(windows, "registry_apps", return_value=[apps.ApplicationRecord(name="Zoom", path="C:/Zoom")]),
            patch.object(windows, "program_directory_apps", return_value=[apps.ApplicationRecord(name="zoom", path="C:/Zoom/Zoom.exe")]),
            patch.object(windows, "store_apps", return_value=[apps.ApplicationRecord(name="SpotifyMusic", path="C:/WA/Spotify_1_x64__abc")]),
        ):
            merged = discovery.discover_installed_apps("windows")
        assert [(r.name, r.path) for r in merged] == [("zoom", "C:/Zoom/Zoom.exe"), ("SpotifyMusic", "C:/WA/Spotify_1_x64__abc")]

    def test_unknown_platform(self) -> None:
        with pytest.raises(ValueError, match="Unsupported platform"):
            discovery.discover_installed_apps("linux")
