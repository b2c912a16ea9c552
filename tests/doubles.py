"""Test doubles: in-memory repositories, a cache that always errors, a fake clock."""

from core.cache import TtlClass
from core.errors import CacheError, RepositoryUnavailable
from verticals.altars.models.schemas import OptionKind
from verticals.altars.seed import (
    seed_discount_tiers,
    seed_extras,
    seed_options,
    seed_pricing_rules,
)

TTLS = {TtlClass.LONG: 3600, TtlClass.MEDIUM: 1800}


class FakeCatalog:
    """CatalogSource over the seeded options; counts calls."""

    def __init__(self, options=None):
        self.options = seed_options() if options is None else options
        self.calls = 0

    async def list_options(self, kind: OptionKind):
        self.calls += 1
        return [o for o in self.options if o.kind == kind and o.available]


class FakeRules:
    """RuleSource over the seeded rules, tiers and extras; counts calls."""

    def __init__(self, pricing_rules=None, discount_tiers=None, extras=None):
        self.pricing_rules = seed_pricing_rules() if pricing_rules is None else pricing_rules
        self.discount_tiers = seed_discount_tiers() if discount_tiers is None else discount_tiers
        self.extras = seed_extras() if extras is None else extras
        self.calls = 0

    async def list_active_pricing_rules(self):
        self.calls += 1
        return [r for r in self.pricing_rules if r.active]

    async def list_active_discount_tiers(self):
        self.calls += 1
        return [t for t in self.discount_tiers if t.active]

    async def list_available_extras(self, category=None):
        self.calls += 1
        return [
            e for e in self.extras
            if e.available and (category is None or e.category == category)
        ]


class DownRules(FakeRules):
    """Every read fails the way an unreachable database does."""

    async def list_active_pricing_rules(self):
        raise RepositoryUnavailable("database down", operation="select_active:reglas_precio")


class FailingCache:
    """Cache whose every call errors."""

    def __init__(self):
        self.calls = 0

    async def _fail(self, operation, key=""):
        self.calls += 1
        raise CacheError("connection refused", operation=operation, key=key)

    async def get(self, key):
        return await self._fail("get", key)

    async def set_with_ttl(self, key, value, ttl_seconds):
        return await self._fail("set", key)

    async def delete(self, key):
        return await self._fail("delete", key)

    async def delete_by_prefix(self, prefix):
        return await self._fail("delete_by_prefix", prefix)

    async def ping(self):
        return False

    async def close(self):
        pass


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


