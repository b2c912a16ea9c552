"""Shared fixtures: seeded snapshot, caches, pricing service."""

import pytest

from core.cache import CacheAside, InMemoryCache
from core.resilience import CircuitBreaker
from doubles import TTLS, FailingCache, FakeCatalog, FakeClock, FakeRules
from verticals.altars.seed import seed_snapshot
from verticals.altars.service import PricingService


@pytest.fixture
def snapshot():
    return seed_snapshot()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    return InMemoryCache(clock=clock)


@pytest.fixture
def cache_aside(memory_cache):
    return CacheAside(memory_cache, ttl_seconds=TTLS)


@pytest.fixture
def failing_cache_aside():
    # Threshold high enough that every call reaches the failing backend
    return CacheAside(
        FailingCache(),
        ttl_seconds=TTLS,
        breaker=CircuitBreaker(failure_threshold=1000),
    )


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def rules():
    return FakeRules()


@pytest.fixture
def service(catalog, rules, cache_aside):
    return PricingService(catalog, rules, cache_aside)
