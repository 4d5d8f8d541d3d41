"""In-process cache of privacy score results.

Scoring an application means shelling out to OS tools or parsing
binaries, so each result is memoized under a fingerprint of the
application's path.  The fingerprint normalises path separators and
case so ``C:\\Apps\\Foo`` and ``c:/apps/foo/`` share one entry.

**Once per key:** while a key is being computed, concurrent callers
await the same future instead of starting their own computation.
Once stored, a result is returned for every later call.  Neither a
failed computation nor an inconclusive (``extraction-error``) result
is stored; the next caller retries.  Cancelling the task that owns a
computation never cancels the callers waiting on it.

**Lifetime:** unbounded by default, so entries live as long as the
process (one scan session).  Passing ``max_entries`` switches to LRU
eviction; an evicted key will be recomputed on its next lookup.
"""

from __future__ import annotations

import asyncio
import collections
import hashlib
import inspect
import re
from collections.abc import Awaitable, Callable

from deviceprivacy.models import apps, scoring
from deviceprivacy.utils import logger

log = logger.create_logger("ScoreCache")

ComputeFn = Callable[[], "scoring.ScoreResult | Awaitable[scoring.ScoreResult]"]

_REPEATED_SEPARATORS = re.compile(r"/{2,}")


# ── Hashing ─────────────────────────────────────────────────────


def normalize_path(path: str) -> str:
    """Separator- and case-normalise *path* for fingerprinting."""
    normalized = _REPEATED_SEPARATORS.sub("/", path.strip().replace("\\", "/"))
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized.casefold()


def fingerprint(path: str) -> str:
    """Return the MD5 hex digest of the normalised *path*."""
    return hashlib.md5(normalize_path(path).encode("utf-8", errors="replace")).hexdigest()


# ── Cache ───────────────────────────────────────────────────────


class _ComputationAbandoned(Exception):
    """Set on a pending future when its owning task is cancelled."""


class ScoreCache:
    """Memoizes :class:`ScoreResult` per application path."""

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._entries: collections.OrderedDict[str, scoring.ScoreResult] = collections.OrderedDict()
        self._pending: dict[str, asyncio.Future[scoring.ScoreResult]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, app: object) -> bool:
        return isinstance(app, apps.ApplicationRecord) and fingerprint(app.path) in self._entries

    def get(self, app: apps.ApplicationRecord) -> scoring.ScoreResult | None:
        """Return the stored result for *app* without computing."""
        return self._entries.get(fingerprint(app.path))

    def clear(self) -> None:
        """Drop every stored result (in-flight computations finish normally)."""
        self._entries.clear()

    def _store(self, key: str, result: scoring.ScoreResult) -> None:
        self._entries[key] = result
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("Evicted score cache entry", {"key": evicted})

    async def get_or_compute(
        self,
        app: apps.ApplicationRecord,
        compute: ComputeFn,
    ) -> scoring.ScoreResult:
        """Return the cached result for *app*, computing it at most once.

        Inconclusive results are handed to concurrent waiters but not
        stored, so the next lookup retries extraction.  If the task
        computing a key is cancelled, one waiter takes the computation
        over; the others keep waiting on it.

        Args:
            app: The application whose path identifies the entry.
            compute: Zero-argument callable returning a ScoreResult
                or an awaitable of one.

        Returns:
            The stored or freshly computed result.
        """
        key = fingerprint(app.path)

        while True:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                self._entries.move_to_end(key)
                log.debug("Using cached permission data", {"path": app.path})
                return cached

            pending = self._pending.get(key)
            if pending is None:
                break
            try:
                result = await asyncio.shield(pending)
            except _ComputationAbandoned:
                continue
            self.hits += 1
            return result

        self.misses += 1
        future: asyncio.Future[scoring.ScoreResult] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            result = compute()
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            future.set_exception(_ComputationAbandoned())
            future.exception()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited failure does not warn on GC.
            future.exception()
            raise
        else:
            if result.is_inconclusive:
                log.debug("Not caching inconclusive result", {"path": app.path})
            else:
                self._store(key, result)
            future.set_result(result)
            return result
        finally:
            self._pending.pop(key, None)
