"""Privacy score calculator.

Resolves an application's evidence tokens through the permission
taxonomy, sums the weight of each distinct canonical permission and
clamps the total to 0..100, so an application with overwhelming
evidence saturates at 100.

Two reserved detail ids keep "nothing to report" apart from "could
not look":

- ``no-permissions``: the evidence source ran and found nothing.
- ``extraction-error``: the evidence source failed.
"""

from __future__ import annotations

from collections.abc import Iterable

from deviceprivacy.config import ScanSettings, get_settings
from deviceprivacy.models import evidence, scoring
from deviceprivacy.scoring import taxonomy as taxonomy_mod
from deviceprivacy.utils import logger

log = logger.create_logger("PrivacyScore")

MAX_SCORE = 100


def _clamp(total: float) -> int:
    """Round *total* and clamp it into 0..100."""
    return max(0, min(MAX_SCORE, round(total)))


def _baseline(canonical_id: str, description: str, weight: int) -> scoring.ScoreResult:
    """Single-detail result used when no permission could be listed."""
    weight = _clamp(weight)
    return scoring.ScoreResult(
        score=weight,
        permissions=[description],
        details=[scoring.PermissionDetail(canonical_id=canonical_id, description=description, weight=weight)],
    )


def no_permissions_result(score: int | None = None) -> scoring.ScoreResult:
    """Result for an application whose source reported zero capabilities."""
    if score is None:
        score = get_settings().no_permissions_score
    return _baseline(scoring.NO_PERMISSIONS_ID, "No specific permissions detected", score)


def extraction_error_result(reason: str, score: int | None = None) -> scoring.ScoreResult:
    """Result for an application whose evidence could not be extracted."""
    if score is None:
        score = get_settings().extraction_error_score
    return _baseline(scoring.EXTRACTION_ERROR_ID, f"Unable to analyse permissions: {reason}", score)


def _unclassified(token: str, default_weight: int) -> scoring.PermissionDefinition:
    return scoring.PermissionDefinition(
        canonical_id=f"{scoring.UNCLASSIFIED_PREFIX}{token}",
        description=f"unclassified capability: {token}",
        base_weight=max(0, default_weight),
    )


def calculate_score(
    tokens: Iterable[object],
    default_weight: int,
    taxonomy: taxonomy_mod.PermissionTaxonomy | None = None,
    *,
    no_permissions_score: int | None = None,
) -> scoring.ScoreResult:
    """Score a sequence of evidence tokens.

    Args:
        tokens: Evidence tokens in arrival order.  Non-strings are
            stringified; blank tokens are ignored.
        default_weight: Weight for tokens the taxonomy does not know.
        taxonomy: Lookup table; the process-wide one by default.
        no_permissions_score: Baseline when nothing resolves;
            settings value by default.

    Returns:
        A :class:`ScoreResult` whose details follow first-arrival
        order, one entry per distinct canonical permission.
    """
    table = taxonomy if taxonomy is not None else taxonomy_mod.get_taxonomy()

    details: list[scoring.PermissionDetail] = []
    seen: set[str] = set()
    unknown: list[str] = []

    for raw in tokens:
        token = str(raw).strip()
        if not token:
            continue

        definition = table.resolve(token)
        if definition is None:
            unknown.append(token)
            definition = _unclassified(token, default_weight)

        if definition.canonical_id in seen:
            continue
        seen.add(definition.canonical_id)
        details.append(
            scoring.PermissionDetail(
                canonical_id=definition.canonical_id,
                description=definition.description,
                weight=definition.base_weight,
                source_token=token,
            )
        )

    if unknown:
        log.debug("Unclassified evidence tokens", {"tokens": unknown, "defaultWeight": default_weight})

    if not details:
        return no_permissions_result(no_permissions_score)

    return scoring.ScoreResult(
        score=_clamp(sum(d.weight for d in details)),
        permissions=[d.description for d in details],
        details=details,
    )


def score_evidence(
    found: evidence.Evidence,
    default_weight: int | None = None,
    taxonomy: taxonomy_mod.PermissionTaxonomy | None = None,
    settings: ScanSettings | None = None,
) -> scoring.ScoreResult:
    """Score the output of an evidence source.

    Failed evidence yields the ``extraction-error`` baseline; empty
    successful evidence yields the ``no-permissions`` baseline.  The
    default weight falls back to the evidence's own hint and then to
    settings.
    """
    settings = settings or get_settings()

    if not found.ok:
        log.debug("Evidence unavailable", {"source": found.source, "reason": found.error})
        return extraction_error_result(found.error or "unknown reason", settings.extraction_error_score)

    if default_weight is None:
        default_weight = found.unknown_token_weight
    if default_weight is None:
        default_weight = settings.unknown_token_weight

    return calculate_score(
        found.tokens, default_weight, taxonomy, no_permissions_score=settings.no_permissions_score
    )
