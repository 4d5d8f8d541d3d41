"""Windows application discovery.

Three adapters, each returning plain ``ApplicationRecord`` lists:

- ``registry_apps``: the Uninstall keys under HKLM (native and
  WOW6432Node) and HKCU.
- ``program_directory_apps``: per-user installs such as
  ``%LOCALAPPDATA%\\Programs``.
- ``store_apps``: packaged apps under ``C:\\Program Files\\WindowsApps``
  (listing it usually requires elevation).
"""

from __future__ import annotations

import os
import pathlib
import sys
from typing import Any

from deviceprivacy.evidence.imports import find_main_executable
from deviceprivacy.models import apps
from deviceprivacy.registry import normalize
from deviceprivacy.utils import logger

if sys.platform == "win32":
    import winreg

log = logger.create_logger("Discovery")

UNINSTALL_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
UNINSTALL_KEY_WOW64 = r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"

DEFAULT_STORE_ROOT = pathlib.Path(r"C:\Program Files\WindowsApps")


def default_program_root() -> pathlib.Path:
    """``%LOCALAPPDATA%\\Programs``, or its conventional location under home."""
    local = os.environ.get("LOCALAPPDATA")
    base = pathlib.Path(local) if local else pathlib.Path.home() / "AppData" / "Local"
    return base / "Programs"


# ============================================================================
# Registry
# ============================================================================


def _registry_value(key: Any, name: str) -> Any:
    try:
        value, _ = winreg.QueryValueEx(key, name)
    except OSError:
        return None
    return value


def _scan_uninstall_key(hive: int, path: str) -> list[apps.ApplicationRecord]:
    records: list[apps.ApplicationRecord] = []
    try:
        key = winreg.OpenKey(hive, path, 0, winreg.KEY_READ | winreg.KEY_WOW64_64KEY)
    except OSError:
        log.info("Registry key not accessible", {"path": path})
        return records

    with key:
        subkey_count = winreg.QueryInfoKey(key)[0]
        for i in range(subkey_count):
            try:
                subkey_name = winreg.EnumKey(key, i)
                subkey = winreg.OpenKey(key, subkey_name)
            except OSError:
                continue
            with subkey:
                if _registry_value(subkey, "SystemComponent") == 1:
                    continue
                name = _registry_value(subkey, "DisplayName")
                location = _registry_value(subkey, "InstallLocation")
                if not name or not location:
                    continue
                location = str(location).strip().strip('"')
                if not location or not os.path.exists(location):
                    continue
                metadata = {
                    field: str(value)
                    for field, value in (
                        ("version", _registry_value(subkey, "DisplayVersion")),
                        ("publisher", _registry_value(subkey, "Publisher")),
                    )
                    if value
                }
                records.append(apps.ApplicationRecord(name=str(name), path=location, platform_metadata=metadata))
    return records


def registry_apps() -> list[apps.ApplicationRecord]:
    """Applications registered under the Uninstall keys.

    Skips ``SystemComponent == 1`` entries and entries whose
    ``InstallLocation`` is missing or does not exist.  Returns an
    empty list off Windows.
    """
    if sys.platform != "win32":
        return []

    records: list[apps.ApplicationRecord] = []
    for hive, path in (
        (winreg.HKEY_LOCAL_MACHINE, UNINSTALL_KEY),
        (winreg.HKEY_LOCAL_MACHINE, UNINSTALL_KEY_WOW64),
        (winreg.HKEY_CURRENT_USER, UNINSTALL_KEY),
    ):
        records.extend(_scan_uninstall_key(hive, path))
    return records


# ============================================================================
# Directories
# ============================================================================


def program_directory_apps(root: pathlib.Path | None = None) -> list[apps.ApplicationRecord]:
    """One record per sub-folder of *root*.

    The record path is the folder's main executable when one can be
    identified, otherwise the folder itself.
    """
    root = root or default_program_root()
    try:
        entries = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError:
        log.info("Program directory not accessible", {"path": str(root)})
        return []

    records: list[apps.ApplicationRecord] = []
    for folder in entries:
        executable = find_main_executable(folder)
        records.append(apps.ApplicationRecord(name=folder.name, path=str(executable or folder)))
    return records


def package_family_name(package_folder: str) -> str:
    """``Name_Version_Arch_Resource_PublisherId`` → ``Name_PublisherId``."""
    parts = package_folder.split("_")
    if len(parts) < 2:
        return package_folder
    return f"{parts[0]}_{parts[-1]}"


def store_apps(root: pathlib.Path | None = None) -> list[apps.ApplicationRecord]:
    """Packaged applications installed under *root*.

    Only package folders (names containing ``_``) are considered and
    framework/system packages are skipped early.
    """
    root = root or DEFAULT_STORE_ROOT
    try:
        entries = sorted(p for p in root.iterdir() if p.is_dir() and "_" in p.name)
    except OSError:
        log.info("Store app directory not accessible", {"path": str(root)})
        return []

    records: list[apps.ApplicationRecord] = []
    for folder in entries:
        if normalize.is_system_app(folder.name):
            continue
        records.append(
            apps.ApplicationRecord(
                name=normalize.display_name(folder.name),
                path=str(folder),
                platform_metadata={"packageFamilyName": package_family_name(folder.name)},
            )
        )
    return records
