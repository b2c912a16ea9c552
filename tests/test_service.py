"""Test the pricing service: cached reads, quotes, fail-open, invalidation."""
from decimal import Decimal

import pytest

from core.cache import CacheAside
from core.errors import RepositoryUnavailable
from doubles import TTLS, DownRules, FakeCatalog, FakeRules
from verticals.altars.cache_keys import AltarCacheKeys
from verticals.altars.errors import InvalidConfigurationError, NoRuleMatchedError
from verticals.altars.models.schemas import ExtraSelection, MutatedEntity, OptionKind, QuoteRequest
from verticals.altars.seed import THICKNESS_3MM, extra_id, rule_id, seed_options
from verticals.altars.service import PricingService

D = Decimal


def _request(**overrides):
    data = {"thickness_id": THICKNESS_3MM, "height": D("40"), "width": D("25")}
    data.update(overrides)
    return QuoteRequest(**data)


@pytest.mark.asyncio
async def test_compute_quote(service):
    quote = await service.compute_quote(_request())
    assert quote.unit_price == D("250.00")
    assert quote.total == D("250.00")
    assert quote.matched_rule_id == rule_id("3", "small")


@pytest.mark.asyncio
async def test_repeat_quote_served_from_cache(service, catalog, rules, memory_cache):
    first = await service.compute_quote(_request(painted=True))
    reads = catalog.calls + rules.calls

    second = await service.compute_quote(_request(painted=True))
    assert second == first
    assert catalog.calls + rules.calls == reads
    assert await memory_cache.get(service.keys.quote(_request(painted=True))) is not None


@pytest.mark.asyncio
async def test_rule_snapshots_cached_across_distinct_quotes(service, rules):
    await service.compute_quote(_request())
    reads = rules.calls
    await service.compute_quote(_request(quantity=2))
    assert rules.calls == reads


@pytest.mark.asyncio
async def test_failing_cache_gives_identical_quote(failing_cache_aside, cache_aside):
    healthy = PricingService(FakeCatalog(), FakeRules(), cache_aside)
    broken = PricingService(FakeCatalog(), FakeRules(), failing_cache_aside)

    request = _request()
    expected = await healthy.compute_quote(request)
    assert await broken.compute_quote(request) == expected
    assert expected.total == D("250.00")


@pytest.mark.asyncio
async def test_failing_cache_recomputes_every_time(failing_cache_aside):
    rules = FakeRules()
    service = PricingService(FakeCatalog(), rules, failing_cache_aside)
    await service.compute_quote(_request())
    reads = rules.calls
    await service.compute_quote(_request())
    assert rules.calls == 2 * reads


@pytest.mark.asyncio
async def test_rejected_quote_not_cached(service, memory_cache):
    request = _request(height=D("55"))
    with pytest.raises(NoRuleMatchedError):
        await service.compute_quote(request)
    assert await memory_cache.get(service.keys.quote(request)) is None


@pytest.mark.asyncio
async def test_repository_outage_propagates(cache_aside):
    service = PricingService(FakeCatalog(), DownRules(), cache_aside)
    with pytest.raises(RepositoryUnavailable):
        await service.compute_quote(_request())


@pytest.mark.asyncio
async def test_disabled_height_option_rejects_quote(cache_aside):
    options = [
        o.model_copy(update={"available": False})
        if o.kind == OptionKind.HEIGHT and o.value == D("40") else o
        for o in seed_options()
    ]
    service = PricingService(FakeCatalog(options), FakeRules(), cache_aside)
    with pytest.raises(InvalidConfigurationError) as exc_info:
        await service.compute_quote(_request())
    assert exc_info.value.field == "height"


@pytest.mark.asyncio
async def test_invalidate_config_option_reloads_dimensions(catalog, rules, cache_aside):
    service = PricingService(catalog, rules, cache_aside)
    await service.compute_quote(_request())

    catalog.options = [
        o.model_copy(update={"available": False})
        if o.kind == OptionKind.WIDTH and o.value == D("25") else o
        for o in catalog.options
    ]
    await service.invalidate(MutatedEntity.CONFIGURATION_OPTION)
    with pytest.raises(InvalidConfigurationError):
        await service.compute_quote(_request())


@pytest.mark.asyncio
async def test_list_options_cached(service, catalog):
    first = await service.list_options(OptionKind.HEIGHT)
    second = await service.list_options(OptionKind.HEIGHT)
    assert [o.value for o in first] == [D(v) for v in ("30", "40", "50", "60", "70", "80")]
    assert second == first
    assert catalog.calls == 1


@pytest.mark.asyncio
async def test_list_extras_by_category(service):
    others = await service.list_available_extras("other")
    assert {e.id for e in others} == {extra_id("vela"), extra_id("cruz")}
    everything = await service.list_available_extras()
    assert len(everything) == 6


@pytest.mark.asyncio
async def test_invalidate_pricing_rule_drops_rules_and_quotes(service, rules, memory_cache):
    await service.compute_quote(_request())
    await service.list_available_extras()
    reads = rules.calls

    deleted = await service.invalidate(MutatedEntity.PRICING_RULE)
    assert deleted == 2  # reglas_precio:all + one quote
    assert await memory_cache.get(service.keys.extras()) is not None

    await service.compute_quote(_request())
    # only the pricing rules were re-read
    assert rules.calls == reads + 1


@pytest.mark.asyncio
async def test_invalidate_after_price_change_serves_new_price(catalog, cache_aside):
    rules = FakeRules()
    service = PricingService(catalog, rules, cache_aside)
    assert (await service.compute_quote(_request())).unit_price == D("250.00")

    rules.pricing_rules = [
        r.model_copy(update={"base_price": D("275.00")}) if r.id == rule_id("3", "small") else r
        for r in rules.pricing_rules
    ]
    # stale until invalidated
    assert (await service.compute_quote(_request())).unit_price == D("250.00")
    await service.invalidate(MutatedEntity.PRICING_RULE)
    assert (await service.compute_quote(_request())).unit_price == D("275.00")


@pytest.mark.asyncio
async def test_invalidate_with_failing_cache_does_not_raise(failing_cache_aside):
    service = PricingService(FakeCatalog(), FakeRules(), failing_cache_aside)
    assert await service.invalidate(MutatedEntity.DISCOUNT_TIER) == 0


@pytest.mark.asyncio
async def test_key_prefix_applied(catalog, rules, cache_aside, memory_cache):
    service = PricingService(catalog, rules, cache_aside, keys=AltarCacheKeys(prefix="test:"))
    await service.compute_quote(_request())
    assert await memory_cache.get("test:reglas_precio:all") is not None


@pytest.mark.asyncio
async def test_quote_order_uses_order_wide_count(service):
    order = await service.quote_order(
        [
            _request(quantity=3),
            _request(
                quantity=3,
                painted=True,
                extras=[ExtraSelection(item_id=extra_id("calavera"), quantity=1)],
            ),
        ]
    )
    assert order.item_count == 6
    # 3 x 250 + 3 x (350 + 40)
    assert order.subtotal == D("1920.00")
    assert all(line.discount_percentage == D("10.00") for line in order.lines)
    assert order.discount == D("192.00")
    assert order.total == D("1728.00")
