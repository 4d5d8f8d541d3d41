"""
Scan pipeline.
Drives evidence collection and scoring for a list of applications
in fixed-width batches, using the score cache so each path is
scored at most once per process.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from deviceprivacy.analysis.score_cache import ScoreCache
from deviceprivacy.config import ScanSettings, get_settings
from deviceprivacy.evidence.base import EvidenceSource
from deviceprivacy.models import apps, scoring
from deviceprivacy.scoring import calculator
from deviceprivacy.utils import logger
from deviceprivacy.utils.errors import get_error_message

log = logger.create_logger("Scan")

# (processed, total, message)
ScanProgressCallback = Callable[[int, int, str], None]


def to_scored_application(app: apps.ApplicationRecord, result: scoring.ScoreResult) -> apps.ScoredApplication:
    """Combine a record and its score into the presentation shape."""
    return apps.ScoredApplication(
        name=app.name,
        path=app.path,
        permissions=list(result.permissions),
        privacy_score=result.score,
        permission_details=[
            apps.PermissionDetailView(name=d.canonical_id, description=d.description, score=d.weight)
            for d in result.details
        ],
    )


async def score_path(
    app: apps.ApplicationRecord,
    source: EvidenceSource,
    cache: ScoreCache,
    settings: ScanSettings | None = None,
) -> scoring.ScoreResult:
    """Score one application through the cache.

    Any failure while collecting evidence or scoring degrades to the
    ``extraction-error`` baseline; the failure itself is not cached.
    """
    settings = settings or get_settings()

    async def compute() -> scoring.ScoreResult:
        return calculator.score_evidence(await source.collect(app), settings=settings)

    try:
        return await cache.get_or_compute(app, compute)
    except Exception as exc:
        log.error("Failed to score application", {"name": app.name, "path": app.path, "error": get_error_message(exc)})
        return calculator.extraction_error_result(get_error_message(exc), settings.extraction_error_score)


async def score_application(
    app: apps.ApplicationRecord,
    source: EvidenceSource,
    cache: ScoreCache,
    settings: ScanSettings | None = None,
) -> apps.ScoredApplication:
    """Score one application and return its presentation object."""
    result = await score_path(app, source, cache, settings)
    return to_scored_application(app, result)


async def scan_applications(
    applications: Sequence[apps.ApplicationRecord],
    source: EvidenceSource,
    *,
    cache: ScoreCache,
    settings: ScanSettings | None = None,
    on_progress: ScanProgressCallback | None = None,
) -> list[apps.ScoredApplication]:
    """Score every application, ``settings.batch_size`` at a time.

    Batches run one after another; members of a batch run
    concurrently.  Output order matches input order.
    """
    settings = settings or get_settings()
    total = len(applications)
    batch_size = settings.batch_size
    batch_count = (total + batch_size - 1) // batch_size

    log.start_timer("scan")
    log.info("Scanning applications", {"total": total, "batchSize": batch_size, "batches": batch_count})
    if on_progress:
        on_progress(0, total, f"Scanning {total} applications...")

    results: list[apps.ScoredApplication] = []
    for batch_idx, start in enumerate(range(0, total, batch_size)):
        batch = applications[start:start + batch_size]
        scored = await asyncio.gather(
            *(score_application(app, source, cache, settings) for app in batch)
        )
        results.extend(scored)
        if on_progress:
            on_progress(
                len(results), total,
                f"Completed batch {batch_idx + 1} of {batch_count} ({len(results)}/{total} applications)",
            )

    log.end_timer("scan", "Scan complete")
    log.success("Applications scored", {"total": total, "cached": len(cache), "cacheHits": cache.hits})
    return results
