"""Cross-source application registry.

Merges the batches produced by every discovery adapter into one
canonical, duplicate-free list:

1. Malformed records (no usable name or path) are dropped.
2. Names are normalised; keys shorter than ``MIN_NAME_LENGTH`` and
   anything on the OS deny-list are dropped.
3. Records sharing a key collapse into one.  A record whose path is
   a concrete executable replaces an earlier directory or package-id
   record in place; otherwise the first one seen is kept.

The output keeps the position at which each key first survived, so
repeated merges of the same input are stable.
"""

from __future__ import annotations

import pathlib
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

import pydantic

from deviceprivacy.models import apps
from deviceprivacy.registry import normalize
from deviceprivacy.utils import logger
from deviceprivacy.utils.errors import MalformedRecordError

log = logger.create_logger("Registry")

# A Windows .exe or a launchable macOS bundle counts as an executable path.
EXECUTABLE_SUFFIXES: tuple[str, ...] = (".exe", ".app")

RecordBatch = tuple[str, Iterable["apps.ApplicationRecord | Mapping[str, Any]"]]


def is_executable_path(path: str) -> bool:
    """True when *path* names an executable rather than a folder or package id."""
    name = path.rstrip("/\\").replace("\\", "/").rsplit("/", 1)[-1].lower()
    if name.endswith(EXECUTABLE_SUFFIXES):
        return True
    candidate = pathlib.Path(path)
    try:
        return candidate.is_file() and candidate.suffix == "" and bool(candidate.stat().st_mode & 0o111)
    except OSError:
        return False


def coerce_record(raw: object) -> apps.ApplicationRecord:
    """Validate *raw* into an ApplicationRecord.

    Raises:
        MalformedRecordError: If the record lacks a non-blank
            ``name`` or ``path``.
    """
    if isinstance(raw, apps.ApplicationRecord):
        return raw
    try:
        return apps.ApplicationRecord.model_validate(raw)
    except pydantic.ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise MalformedRecordError(f"Invalid application record ({', '.join(fields) or 'record'})") from exc


def merge(
    batches: Sequence[RecordBatch],
    *,
    is_executable: Callable[[str], bool] = is_executable_path,
) -> list[apps.ApplicationRecord]:
    """Merge discovery batches into a deduplicated application list.

    Args:
        batches: ``(source_name, records)`` pairs.  The source name
            only labels log output.
        is_executable: Path-quality predicate used for tie-breaks.

    Returns:
        Surviving records in first-surviving insertion order.
    """
    merged: list[apps.ApplicationRecord] = []
    index_by_key: dict[str, int] = {}
    dropped = {"malformed": 0, "short": 0, "system": 0, "duplicate": 0}

    for source_name, records in batches:
        for raw in records:
            try:
                record = coerce_record(raw)
            except MalformedRecordError as exc:
                dropped["malformed"] += 1
                log.warn("Dropping malformed record", {"source": source_name, "error": str(exc)})
                continue

            key = normalize.normalize_name(record.name)
            if len(key) < normalize.MIN_NAME_LENGTH:
                dropped["short"] += 1
                continue
            if normalize.is_system_app(record.name, record.path):
                dropped["system"] += 1
                continue

            existing_index = index_by_key.get(key)
            if existing_index is None:
                index_by_key[key] = len(merged)
                merged.append(record)
                continue

            dropped["duplicate"] += 1
            existing = merged[existing_index]
            if is_executable(record.path) and not is_executable(existing.path):
                log.debug(
                    "Replacing duplicate with executable-path record",
                    {"key": key, "source": source_name, "from": existing.path, "to": record.path},
                )
                merged[existing_index] = record

    log.info(
        "Application registry merged",
        {
            "sources": len(batches),
            "applications": len(merged),
            **{f"dropped_{reason}": count for reason, count in dropped.items()},
        },
    )
    return merged
