"""
Core Cache: cache-aside primitives.

- Cache / RedisCache / InMemoryCache: key-value clients
- CacheAside: fail-open read-through wrapper with prefix invalidation
- keys: canonical key derivation helpers and TTL classes
"""
from core.cache.cache_aside import (
    CacheAside,
    CacheOutcome,
    CacheResult,
    Codec,
)
from core.cache.client import (
    Cache,
    InMemoryCache,
    RedisCache,
)
from core.cache.keys import (
    KeyBuilder,
    TtlClass,
    canonical_decimal,
    canonical_pairs,
    digest,
)

__all__ = [
    # Aside
    "CacheAside",
    "CacheOutcome",
    "CacheResult",
    "Codec",
    # Clients
    "Cache",
    "InMemoryCache",
    "RedisCache",
    # Keys
    "KeyBuilder",
    "TtlClass",
    "canonical_decimal",
    "canonical_pairs",
    "digest",
]
