"""Windows PE import-table reader.

Lists the DLLs a Win32 executable imports.  Which system libraries a
program links against (registry, sockets, WinINet, media capture) is
the evidence for unpackaged desktop apps.  Parsing uses ``pefile`` in
a worker thread.
"""

from __future__ import annotations

import asyncio
import pathlib
import re

import pefile

from deviceprivacy.evidence.base import EvidenceSource
from deviceprivacy.models import apps
from deviceprivacy.utils.errors import EvidenceUnavailableError

# API-set stubs forward to real system DLLs and carry no signal.
_API_SET_PREFIXES = ("api-ms-win-", "ext-ms-")

# Executables that are never the program itself.
_SKIP_EXE_PREFIXES = ("unins", "uninstall", "setup", "install", "update", "crashpad", "crashreporter")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _simplify(name: str) -> str:
    return _NON_ALNUM.sub("", name.lower())


def find_main_executable(directory: pathlib.Path) -> pathlib.Path | None:
    """Pick the program's main ``.exe`` in an install directory.

    Prefers an executable whose stem matches the folder name, then
    the first non-installer executable in name order.
    """
    try:
        candidates = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".exe" and not p.name.lower().startswith(_SKIP_EXE_PREFIXES)
        )
    except OSError:
        return None

    folder = _simplify(directory.name)
    for candidate in candidates:
        if folder and _simplify(candidate.stem) == folder:
            return candidate
    return candidates[0] if candidates else None


def read_imports(executable: pathlib.Path) -> list[str]:
    """Return lower-cased imported DLL names in import-table order.

    Raises:
        EvidenceUnavailableError: If the file is not a readable PE image.
    """
    try:
        pe = pefile.PE(str(executable), fast_load=True)
    except (OSError, pefile.PEFormatError) as exc:
        raise EvidenceUnavailableError("Error parsing executable.") from exc

    try:
        pe.parse_data_directories(directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_IMPORT"]])
        names: list[str] = []
        for entry in getattr(pe, "DIRECTORY_ENTRY_IMPORT", []):
            dll = entry.dll.decode("ascii", errors="replace").lower()
            if dll.startswith(_API_SET_PREFIXES) or dll in names:
                continue
            names.append(dll)
        return names
    finally:
        pe.close()


class ImportedLibraryReader(EvidenceSource):
    """Reads imported system libraries from a Win32 executable."""

    name = "pe-imports"
    # Most imports are benign runtime libraries; only known ones score.
    unknown_token_weight = 0

    def _target(self, app: apps.ApplicationRecord) -> pathlib.Path | None:
        path = pathlib.Path(app.path)
        if path.suffix.lower() == ".exe":
            return path if path.is_file() else None
        if path.is_dir():
            return find_main_executable(path)
        return None

    def supports(self, app: apps.ApplicationRecord) -> bool:
        path = pathlib.Path(app.path)
        return path.suffix.lower() == ".exe" or path.is_dir()

    async def extract(self, app: apps.ApplicationRecord) -> list[str]:
        target = await asyncio.to_thread(self._target, app)
        if target is None:
            raise EvidenceUnavailableError("Application not found.")
        return await asyncio.to_thread(read_imports, target)
