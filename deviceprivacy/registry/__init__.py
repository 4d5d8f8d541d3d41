"""Application registry: name normalisation, OS filtering and merging."""

from __future__ import annotations

from deviceprivacy.registry.deduplicator import is_executable_path, merge
from deviceprivacy.registry.normalize import display_name, is_system_app, normalize_name

__all__ = ["display_name", "is_executable_path", "is_system_app", "merge", "normalize_name"]
