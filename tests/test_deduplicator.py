"""Tests for deviceprivacy.registry.deduplicator: cross-source merging."""

from __future__ import annotations

import os
import sys

import pytest

from deviceprivacy.models import apps
from deviceprivacy.registry import deduplicator
from deviceprivacy.utils.errors import MalformedRecordError


def _rec(name: str, path: str) -> apps.ApplicationRecord:
    return apps.ApplicationRecord(name=name, path=path)


class TestIsExecutablePath:
    """Tests for is_executable_path()."""

    @pytest.mark.parametrize(
        "path",
        ["C:\\Apps\\Foo\\foo.exe", "C:/Apps/Foo/FOO.EXE", "/Applications/Foo.app", "/Applications/Foo.app/"],
    )
    def test_executable_suffixes(self, path: str) -> None:
        assert deduplicator.is_executable_path(path)

    @pytest.mark.parametrize("path", ["C:\\Apps\\Foo", "Contoso.PhotoEditor_1.0.0.0_x64__abc123", "/nonexistent/tool"])
    def test_directories_and_package_ids(self, path: str) -> None:
        assert not deduplicator.is_executable_path(path)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_suffixless_executable_file(self, tmp_path) -> None:
        binary = tmp_path / "tool"
        binary.write_bytes(b"\x7fELF")
        assert not deduplicator.is_executable_path(str(binary))
        os.chmod(binary, 0o755)
        assert deduplicator.is_executable_path(str(binary))


class TestCoerceRecord:
    """Tests for coerce_record()."""

    def test_passthrough(self) -> None:
        record = _rec("Foo", "C:/Foo")
        assert deduplicator.coerce_record(record) is record

    def test_mapping_with_camel_case_metadata(self) -> None:
        record = deduplicator.coerce_record({"name": "Foo", "path": "/Applications/Foo.app", "platformMetadata": {"bundleId": "com.foo"}})
        assert record.platform_metadata == {"bundleId": "com.foo"}

    @pytest.mark.parametrize(
        "raw",
        [{"name": "", "path": "C:/Foo"}, {"name": "Foo"}, {"path": "C:/Foo"}, {"name": "Foo", "path": "   "}, None, "Foo"],
    )
    def test_malformed(self, raw: object) -> None:
        with pytest.raises(MalformedRecordError):
            deduplicator.coerce_record(raw)


class TestMerge:
    """Tests for merge()."""

    def test_duplicates_collapse_case_insensitively(self) -> None:
        merged = deduplicator.merge([
            ("registry", [_rec("Zoom", "C:/Zoom")]),
            ("programs", [_rec("zoom", "C:/Users/me/Zoom")]),
        ])
        assert [r.path for r in merged] == ["C:/Zoom"]

    def test_first_seen_wins_between_equals(self) -> None:
        merged = deduplicator.merge([
            ("a", [_rec("Slack", "C:/Slack")]),
            ("b", [_rec("Slack", "D:/Slack")]),
        ])
        assert merged[0].path == "C:/Slack"

    @pytest.mark.parametrize("reverse", [False, True])
    def test_executable_path_preferred_in_either_order(self, reverse: bool) -> None:
        folder = _rec("Spotify", "C:/Users/me/AppData/Roaming/Spotify")
        exe = _rec("Spotify", "C:/Users/me/AppData/Roaming/Spotify/Spotify.exe")
        pair = [exe, folder] if reverse else [folder, exe]
        merged = deduplicator.merge([
            ("registry", [_rec("Blender", "C:/Blender"), pair[0]]),
            ("programs", [pair[1]]),
        ])
        assert [r.name for r in merged] == ["Blender", "Spotify"]
        assert merged[1].path.endswith("Spotify.exe")

    def test_deny_listed_records_dropped(self) -> None:
        merged = deduplicator.merge([
            ("store", [
                _rec("Microsoft.WindowsCalculator_8wekyb3d8bbwe", "C:/Program Files/WindowsApps/Microsoft.WindowsCalculator_8wekyb3d8bbwe"),
                _rec("SpotifyMusic", "C:/Program Files/WindowsApps/SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0"),
            ]),
        ])
        assert [r.name for r in merged] == ["SpotifyMusic"]

    def test_short_names_dropped(self) -> None:
        merged = deduplicator.merge([("programs", [_rec("Go", "C:/Go"), _rec("Git", "C:/Git")])])
        assert [r.name for r in merged] == ["Git"]

    def test_malformed_records_dropped(self) -> None:
        merged = deduplicator.merge([
            ("registry", [{"name": "", "path": "C:/Nameless"}, {"name": "Pathless"}, {"name": "Valid", "path": "C:/Valid"}]),
        ])
        assert [r.name for r in merged] == ["Valid"]

    def test_idempotent(self) -> None:
        batches = [
            ("registry", [_rec("Zoom", "C:/Zoom"), _rec("Spotify", "C:/Spotify")]),
            ("programs", [_rec("zoom", "C:/Zoom/Zoom.exe"), _rec("Obsidian", "C:/Obsidian/Obsidian.exe")]),
            ("store", [_rec("Microsoft.WindowsCalculator_8wekyb3d8bbwe", "C:/WindowsApps/calc")]),
        ]
        once = deduplicator.merge(batches)
        twice = deduplicator.merge([("merged", once)])
        assert once == twice
        assert [r.name for r in once] == ["zoom", "Spotify", "Obsidian"]
        assert once[0].path == "C:/Zoom/Zoom.exe"

    def test_custom_predicate(self) -> None:
        merged = deduplicator.merge(
            [("a", [_rec("Tool", "x")]), ("b", [_rec("Tool", "y")])],
            is_executable=lambda p: p == "y",
        )
        assert merged[0].path == "y"

    def test_empty(self) -> None:
        assert deduplicator.merge([]) == []
