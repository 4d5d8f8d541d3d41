"""Batch scan pipeline."""

from __future__ import annotations

from deviceprivacy.pipeline.scan import scan_applications, score_application, score_path, to_scored_application

__all__ = ["scan_applications", "score_application", "score_path", "to_scored_application"]
