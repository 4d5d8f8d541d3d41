"""
Scan engine configuration.

Centralises every tunable policy value (batch width, baseline scores,
default weight for unknown evidence, cache bound) and the API bind
address.  Uses ``pydantic_settings.BaseSettings`` so each value can be
overridden from the environment or a ``.env`` file.
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings


class ScanSettings(pydantic_settings.BaseSettings):
    """Policy and server settings.

    Attributes:
        batch_size: Applications scored concurrently per batch.
        unknown_token_weight: Weight given to evidence tokens the
            taxonomy does not know, unless the evidence source
            declares its own.
        no_permissions_score: Baseline when a source reported zero
            capabilities.
        extraction_error_score: Baseline when a source failed.
        cache_max_entries: Optional LRU bound for the score cache;
            ``None`` keeps every entry for the process lifetime.
        host: API bind host.
        port: API bind port.
    """

    batch_size: int = pydantic.Field(
        default=10, ge=1, validation_alias="DEVICEPRIVACY_BATCH_SIZE"
    )
    unknown_token_weight: int = pydantic.Field(
        default=5, ge=0, validation_alias="DEVICEPRIVACY_UNKNOWN_TOKEN_WEIGHT"
    )
    no_permissions_score: int = pydantic.Field(
        default=0, ge=0, le=100, validation_alias="DEVICEPRIVACY_NO_PERMISSIONS_SCORE"
    )
    extraction_error_score: int = pydantic.Field(
        default=10, ge=0, le=100, validation_alias="DEVICEPRIVACY_ERROR_SCORE"
    )
    cache_max_entries: int | None = pydantic.Field(
        default=None, ge=1, validation_alias="DEVICEPRIVACY_CACHE_MAX_ENTRIES"
    )
    host: str = pydantic.Field(
        default="127.0.0.1", validation_alias="DEVICEPRIVACY_HOST"
    )
    port: int = pydantic.Field(
        default=5001, validation_alias="DEVICEPRIVACY_PORT"
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> ScanSettings:
    """Return the process-wide settings (read once)."""
    return ScanSettings()
