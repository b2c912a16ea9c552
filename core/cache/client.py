"""
Key-value cache clients.

Every client speaks the same small async contract (Cache protocol):
- get(key) -> str | None
- set_with_ttl(key, value, ttl_seconds)   (unconditional SET, never CAS)
- delete(key) -> int
- delete_by_prefix(prefix) -> int

Implementations:
- RedisCache: redis.asyncio backed, bounded by a per-call timeout.
- InMemoryCache: dict backed with per-entry deadlines. Used for local
  runs without redis and as the healthy cache in tests.

Clients raise CacheError on failure. Absorbing those failures is the job
of CacheAside, not of the client.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, TypeVar, runtime_checkable
import asyncio
import time

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from core.errors import CacheError

T = TypeVar("T")

_GLOB_SPECIALS = "\\*?[]"


def _escape_glob(prefix: str) -> str:
    """Escape redis MATCH glob characters so a prefix is matched literally."""
    return "".join(f"\\{c}" if c in _GLOB_SPECIALS else c for c in prefix)


@runtime_checkable
class Cache(Protocol):
    """Async key-value cache contract."""

    async def get(self, key: str) -> str | None: ...

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> int: ...

    async def delete_by_prefix(self, prefix: str) -> int: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

class RedisCache:
    """Redis-backed cache. Construct once at process start, close on shutdown."""

    def __init__(
        self,
        client: aioredis.Redis,
        timeout_seconds: float = 0.5,
        scan_batch_size: int = 500,
    ):
        self._client = client
        self.timeout_seconds = timeout_seconds
        self.scan_batch_size = scan_batch_size

    @classmethod
    def from_url(cls, url: str, timeout_seconds: float = 0.5) -> "RedisCache":
        client = aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, timeout_seconds=timeout_seconds)

    async def _call(self, operation: str, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(fn(), timeout=self.timeout_seconds)
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise CacheError(
                f"redis {operation} failed: {exc!r}", operation=operation, key=key
            ) from exc

    async def get(self, key: str) -> str | None:
        return await self._call("get", key, lambda: self._client.get(key))

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._call("set", key, lambda: self._client.set(key, value, ex=ttl_seconds))

    async def delete(self, key: str) -> int:
        return int(await self._call("delete", key, lambda: self._client.delete(key)))

    async def delete_by_prefix(self, prefix: str) -> int:
        pattern = f"{_escape_glob(prefix)}*"

        async def _scan_and_delete() -> int:
            deleted = 0
            batch: list[str] = []
            async for key in self._client.scan_iter(match=pattern, count=self.scan_batch_size):
                batch.append(key)
                if len(batch) >= self.scan_batch_size:
                    deleted += await self._client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self._client.delete(*batch)
            return deleted

        # SCAN walks the whole keyspace; allow it more time than a point lookup
        try:
            return await asyncio.wait_for(_scan_and_delete(), timeout=self.timeout_seconds * 20)
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise CacheError(
                f"redis delete_by_prefix failed: {exc!r}",
                operation="delete_by_prefix",
                key=prefix,
            ) from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._call("ping", "", lambda: self._client.ping()))
        except CacheError:
            return False

    async def close(self) -> None:
        await self._client.aclose()


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

@dataclass
class _Entry:
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryCache:
    """In-process cache with TTL. Not shared between processes."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, _Entry] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)

    async def delete(self, key: str) -> int:
        return 1 if self._entries.pop(key, None) is not None else 0

    async def delete_by_prefix(self, prefix: str) -> int:
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()
