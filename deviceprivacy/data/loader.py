"""
Data loader for the permission taxonomy reference files.

The JSON files live alongside this module in the taxonomy/
subdirectory: one file of canonical permission definitions and one
token map per evidence origin.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any

from deviceprivacy.models import scoring

# Resolve path to the data directory (same directory as this module)
_DATA_DIR = pathlib.Path(__file__).resolve().parent

DEFINITIONS_FILE = "taxonomy/permissions.json"

# One token map per evidence origin; order is the lookup-table build order.
TOKEN_FILES: tuple[str, ...] = (
    "taxonomy/plist-usage-keys.json",
    "taxonomy/entitlements.json",
    "taxonomy/appx-capabilities.json",
    "taxonomy/windows-imports.json",
)

# ============================================================================
# JSON File Loading
# ============================================================================


def _load_json(relative_path: str) -> Any:
    """Load and parse a JSON file relative to the data directory.

    Raises:
        FileNotFoundError: If the JSON file does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
    """
    full_path = _DATA_DIR / relative_path
    if not full_path.exists():
        raise FileNotFoundError(f"Data file not found: {relative_path}")
    with open(full_path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise json.JSONDecodeError(
                f"Invalid JSON in {relative_path}: {exc.msg}",
                exc.doc,
                exc.pos,
            ) from exc


# ============================================================================
# Taxonomy Loading
# ============================================================================


def load_permission_definitions(
    relative_path: str = DEFINITIONS_FILE,
) -> dict[str, scoring.PermissionDefinition]:
    """Load canonical permission definitions keyed by canonical id."""
    raw: dict[str, dict[str, Any]] = _load_json(relative_path)
    return {
        canonical_id: scoring.PermissionDefinition(
            canonical_id=canonical_id,
            description=entry["description"],
            base_weight=entry["weight"],
        )
        for canonical_id, entry in raw.items()
    }


def load_token_map(relative_path: str) -> dict[str, str]:
    """Load one origin's raw-token -> canonical-id map."""
    raw: dict[str, str] = _load_json(relative_path)
    return {str(token): str(canonical_id) for token, canonical_id in raw.items()}


def load_token_maps(files: tuple[str, ...] = TOKEN_FILES) -> dict[str, str]:
    """Load and merge every origin's token map.

    Raises:
        ValueError: If two files claim the same raw token.  Origins
            must be disjoint; ambiguous literals get a prefix.
    """
    merged: dict[str, str] = {}
    owner: dict[str, str] = {}
    for relative_path in files:
        for token, canonical_id in load_token_map(relative_path).items():
            if token in merged:
                raise ValueError(
                    f"Token {token!r} defined in both {owner[token]} and {relative_path}"
                )
            merged[token] = canonical_id
            owner[token] = relative_path
    return merged
