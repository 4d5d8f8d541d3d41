"""Application name normalisation and OS-noise filtering.

Discovery sources name the same program differently: the registry
says ``Spotify``, the Store folder says
``SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0``.  The helpers
here reduce a name to a comparison key and decide whether a record is
part of the operating system rather than something the user installed.
"""

from __future__ import annotations

import re

# Names shorter than this after normalisation are too ambiguous to keep.
MIN_NAME_LENGTH = 3

# Case-insensitive substrings identifying OS shell components, runtimes,
# Office/update/installer packages and vendor housekeeping utilities.
SYSTEM_APP_KEYWORDS: tuple[str, ...] = (
    # Windows shell and inbox apps
    "microsoft.windows",
    "microsoft.bing",
    "microsoft.office",
    "microsoft.edge",
    "microsoft.skype",
    "microsoft.zune",
    "microsoft.xbox",
    "microsoft.getstarted",
    "microsoft.people",
    "microsoft.yourphone",
    "microsoft.desktopappinstaller",
    "microsoft.photos",
    "microsoft.storepurchaseapp",
    "windowscalculator",
    "windows.printdialog",
    "inputapp",
    "feedbackhub",
    # Runtimes and frameworks
    "vclibs",
    "directx",
    "runtime",
    "microsoft.net",
    "microsoft.ui.xaml",
    "microsoft.services",
    "uwpdesktop",
    "gamingservices",
    "imageextension",
    "videoextension",
    "mediaextensions",
    # Update, installer and housekeeping components
    "appinstaller",
    "onedrive",
    "update health",
    "uninstall",
    # macOS system locations
    "/system/applications/",
    "/system/library/",
)

_TRAILING_TOKEN = re.compile(r"_+[a-z0-9]+$")
_TRAILING_VERSION = re.compile(r"\.[0-9]+$")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Reduce a display name to its deduplication key.

    Lower-cases and trims, then repeatedly drops trailing
    ``_<token>`` segments (architecture, publisher hash) and trailing
    ``.<digits>`` version tails until nothing changes, and finally
    turns underscores into spaces.

    >>> normalize_name("SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0")
    'spotifyab.spotifymusic'
    """
    key = name.strip().lower()
    previous = None
    while key != previous:
        previous = key
        key = _TRAILING_TOKEN.sub("", key)
        key = _TRAILING_VERSION.sub("", key)
    key = key.replace("_", " ")
    return _WHITESPACE.sub(" ", key).strip()


def is_system_app(name: str, path: str = "") -> bool:
    """True when the name or path matches the OS/runtime deny-list."""
    haystacks = (normalize_name(name), name.lower(), path.lower().replace("\\", "/"))
    return any(keyword in haystack for haystack in haystacks for keyword in SYSTEM_APP_KEYWORDS)


def display_name(package_folder: str) -> str:
    """Turn a Store package folder name into a readable display name.

    Drops the publisher prefix (``Microsoft.``, ``SpotifyAB.``) and
    the version/architecture/publisher-hash suffixes.

    >>> display_name("SpotifyAB.SpotifyMusic_1.2.3.0_x64__zpdnekdrzrea0")
    'SpotifyMusic'
    """
    stem = package_folder.split("_", 1)[0]
    if "." in stem:
        stem = stem.split(".", 1)[1] or stem
    return stem.strip() or package_folder
