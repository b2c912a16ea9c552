"""
Cache-aside façade with fail-open semantics.

Per request:
1. Lookup   : cache.get(key). Value present and decodable -> HIT, return.
2. Compute  : on miss, cache error, bypass or undecodable entry, run the
              underlying computation. Its errors propagate untouched: a
              cache problem is never reported as "no data".
3. Populate : cache.set_with_ttl(key, value, ttl). Failure is logged and
              swallowed; the computed value is still returned.

Invalidation deletes whole namespaces by prefix and, like populate, never
fails the caller.

Every cache-path failure is absorbed (Exception, not BaseException, so
task cancellation still propagates). A CircuitBreaker skips the cache
entirely while it is known to be down, so an outage costs no timeouts.
Concurrent misses on one key each recompute and each write the same
value; there is no in-flight de-duplication.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

import structlog

from core.cache.client import Cache
from core.cache.keys import TtlClass
from core.resilience.circuit_breaker import CircuitBreaker

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Codec(Generic[T]):
    """String serialisation for cached values."""

    encode: Callable[[T], str]
    decode: Callable[[str], T]


class CacheOutcome(str, Enum):
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"        # cache call failed, value recomputed
    BYPASS = "bypass"      # breaker open, cache not consulted
    CORRUPT = "corrupt"    # entry present but undecodable


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    value: T
    outcome: CacheOutcome

    @property
    def hit(self) -> bool:
        return self.outcome == CacheOutcome.HIT


class CacheAside:
    """Wraps any async computation behind a cache key."""

    def __init__(
        self,
        cache: Cache,
        ttl_seconds: dict[TtlClass, int],
        breaker: CircuitBreaker | None = None,
    ):
        missing = [t.value for t in TtlClass if t not in ttl_seconds]
        if missing:
            raise ValueError(f"ttl_seconds missing TTL classes: {missing}")
        self.cache = cache
        self.ttl_seconds = dict(ttl_seconds)
        self.breaker = breaker or CircuitBreaker(name="cache")

    # -- Read path --

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        codec: Codec[T],
        ttl: TtlClass,
    ) -> T:
        result = await self.fetch(key, compute, codec, ttl)
        return result.value

    async def fetch(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        codec: Codec[T],
        ttl: TtlClass,
    ) -> CacheResult[T]:
        """Like get_or_compute, but reports where the value came from."""
        outcome, cached = await self._lookup(key, codec)
        if outcome == CacheOutcome.HIT:
            return CacheResult(value=cached, outcome=outcome)

        value = await compute()
        await self._populate(key, value, codec, ttl)
        return CacheResult(value=value, outcome=outcome)

    async def _lookup(self, key: str, codec: Codec[T]) -> tuple[CacheOutcome, T | None]:
        if not self.breaker.allow():
            logger.debug("cache_bypassed", key=key, breaker=self.breaker.state.value)
            return CacheOutcome.BYPASS, None

        try:
            raw = await self.cache.get(key)
        except Exception as exc:
            self.breaker.record_failure()
            logger.warning("cache_get_failed", key=key, error=repr(exc))
            return CacheOutcome.ERROR, None
        except BaseException:
            # Cancelled mid-call: no outcome to record, free the probe
            self.breaker.release_probe()
            raise

        self.breaker.record_success()
        if raw is None:
            return CacheOutcome.MISS, None

        try:
            return CacheOutcome.HIT, codec.decode(raw)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("cache_decode_failed", key=key, error=repr(exc))
            return CacheOutcome.CORRUPT, None

    async def _populate(self, key: str, value: T, codec: Codec[T], ttl: TtlClass) -> None:
        if not self.breaker.allow():
            return

        try:
            await self.cache.set_with_ttl(key, codec.encode(value), self.ttl_seconds[ttl])
        except Exception as exc:
            self.breaker.record_failure()
            logger.warning("cache_set_failed", key=key, error=repr(exc))
            return
        except BaseException:
            self.breaker.release_probe()
            raise
        self.breaker.record_success()

    # -- Invalidation --

    async def invalidate(self, prefixes: Iterable[str]) -> int:
        """Delete every key under each prefix. Returns keys deleted.

        Invalidation bypasses the breaker: a missed invalidation leaves stale
        data until TTL expiry, so it is always attempted.
        """
        total = 0
        for prefix in prefixes:
            try:
                deleted = await self.cache.delete_by_prefix(prefix)
            except Exception as exc:
                logger.warning("cache_invalidate_failed", prefix=prefix, error=repr(exc))
                continue
            total += deleted
            logger.info("cache_invalidated", prefix=prefix, deleted=deleted)
        return total

    async def delete(self, key: str) -> bool:
        try:
            return await self.cache.delete(key) > 0
        except Exception as exc:
            logger.warning("cache_invalidate_failed", key=key, error=repr(exc))
            return False
