"""Risk-tier helpers shared by the API and the scan summary."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from deviceprivacy.models import apps

RiskTier = Literal["High", "Medium", "Low"]

HIGH_THRESHOLD = 61
MEDIUM_THRESHOLD = 31


def risk_tier(score: int) -> RiskTier:
    """Map a 0-100 privacy score to its display tier.

    ``>= 61`` is High, ``31..60`` (inclusive) is Medium and
    ``<= 30`` is Low.
    """
    if score >= HIGH_THRESHOLD:
        return "High"
    if score >= MEDIUM_THRESHOLD:
        return "Medium"
    return "Low"


def summarize_tiers(scored: Iterable[apps.ScoredApplication]) -> apps.TierSummary:
    """Count applications per risk tier."""
    counts = {"High": 0, "Medium": 0, "Low": 0}
    for app in scored:
        counts[risk_tier(app.privacy_score)] += 1
    return apps.TierSummary(
        high=counts["High"],
        medium=counts["Medium"],
        low=counts["Low"],
        total=sum(counts.values()),
    )


def filter_applications(
    scored: Iterable[apps.ScoredApplication],
    search: str = "",
    tier: str = "all",
) -> list[apps.ScoredApplication]:
    """Filter scored applications by a search term and a risk tier.

    Args:
        scored: Applications to filter.
        search: Case-insensitive substring matched against the
            name and the path.  Empty matches everything.
        tier: ``"all"``, ``"high"``, ``"medium"`` or ``"low"``.

    Returns:
        The matching applications in their original order.
    """
    term = search.strip().lower()
    wanted = tier.strip().lower()
    result: list[apps.ScoredApplication] = []
    for app in scored:
        if term and term not in app.name.lower() and term not in app.path.lower():
            continue
        if wanted != "all" and risk_tier(app.privacy_score).lower() != wanted:
            continue
        result.append(app)
    return result
