"""Privacy scoring package.

The public API is :func:`calculate_score` for raw tokens and
:func:`score_evidence` for the output of an evidence source.
"""

from __future__ import annotations

from deviceprivacy.scoring.calculator import calculate_score, score_evidence
from deviceprivacy.scoring.taxonomy import get_taxonomy

__all__ = ["calculate_score", "get_taxonomy", "score_evidence"]
