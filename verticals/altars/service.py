"""Pricing service: the cache-aside entry point for the altar vertical.

Request flow::

    compute_quote(request)
      -> cache lookup precio:calc:<digest>           (hit: return)
      -> load_snapshot()                              (each read cache-aside,
           options / rules / tiers / extras            long TTL)
      -> quotes.compute_quote(request, snapshot)      (pure)
      -> cache populate (medium TTL), return

Construct one service per request (repositories are session-bound); the
CacheAside it receives is the process-wide instance built at startup.
Data errors (QuoteError) and RepositoryUnavailable propagate; cache
failures never do.
"""

from typing import Iterable, Optional

import structlog
from opentelemetry import trace
from pydantic import TypeAdapter

from core.cache.cache_aside import CacheAside, Codec
from core.cache.keys import TtlClass
from patterns.domain_config import PricingConfig
from verticals.altars.cache_keys import AltarCacheKeys
from verticals.altars.errors import QuoteError
from verticals.altars.models.schemas import (
    ConfigurationOption,
    DiscountTier,
    ExtraItem,
    MutatedEntity,
    OptionKind,
    OrderQuote,
    PricingRule,
    Quote,
    QuoteRequest,
)
from verticals.altars.quotes import PricingSnapshot, compute_quote, summarize_order
from verticals.altars.repository import CatalogSource, RuleSource

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


def list_codec(model: type) -> Codec:
    adapter = TypeAdapter(list[model])
    return Codec(
        encode=lambda items: adapter.dump_json(items).decode("utf-8"),
        decode=adapter.validate_json,
    )


OPTIONS_CODEC = list_codec(ConfigurationOption)
PRICING_RULES_CODEC = list_codec(PricingRule)
DISCOUNT_TIERS_CODEC = list_codec(DiscountTier)
EXTRAS_CODEC = list_codec(ExtraItem)
QUOTE_CODEC: Codec[Quote] = Codec(
    encode=lambda q: q.model_dump_json(),
    decode=Quote.model_validate_json,
)


class PricingService:
    """Cached reads + quote computation for one request."""

    def __init__(
        self,
        catalog: CatalogSource,
        rules: RuleSource,
        cache: CacheAside,
        keys: Optional[AltarCacheKeys] = None,
        pricing: Optional[PricingConfig] = None,
    ):
        self.catalog = catalog
        self.rules = rules
        self.cache = cache
        self.keys = keys or AltarCacheKeys()
        self.pricing = pricing or PricingConfig()

    # -- Cached reads (long TTL) --

    async def list_options(self, kind: OptionKind) -> list[ConfigurationOption]:
        return await self.cache.get_or_compute(
            self.keys.options(kind),
            lambda: self.catalog.list_options(kind),
            OPTIONS_CODEC,
            TtlClass.LONG,
        )

    async def list_active_pricing_rules(self) -> list[PricingRule]:
        return await self.cache.get_or_compute(
            self.keys.pricing_rules(),
            self.rules.list_active_pricing_rules,
            PRICING_RULES_CODEC,
            TtlClass.LONG,
        )

    async def list_active_discount_tiers(self) -> list[DiscountTier]:
        return await self.cache.get_or_compute(
            self.keys.discount_tiers(),
            self.rules.list_active_discount_tiers,
            DISCOUNT_TIERS_CODEC,
            TtlClass.LONG,
        )

    async def list_available_extras(self, category: Optional[str] = None) -> list[ExtraItem]:
        return await self.cache.get_or_compute(
            self.keys.extras(category),
            lambda: self.rules.list_available_extras(category),
            EXTRAS_CODEC,
            TtlClass.LONG,
        )

    async def load_snapshot(self) -> PricingSnapshot:
        # Sequential on purpose: repositories share one AsyncSession
        thickness = await self.list_options(OptionKind.THICKNESS)
        heights = await self.list_options(OptionKind.HEIGHT)
        widths = await self.list_options(OptionKind.WIDTH)
        pricing_rules = await self.list_active_pricing_rules()
        tiers = await self.list_active_discount_tiers()
        extras = await self.list_available_extras()
        return PricingSnapshot.build(
            thickness,
            pricing_rules,
            tiers,
            extras,
            height_options=heights,
            width_options=widths,
        )

    # -- Quotes (medium TTL) --

    async def compute_quote(self, request: QuoteRequest) -> Quote:
        key = self.keys.quote(request)

        with tracer.start_as_current_span("altars.quote") as span:
            span.set_attribute("quote.cache_key", key)
            span.set_attribute("quote.thickness_id", request.thickness_id)
            span.set_attribute("quote.quantity", request.quantity)

            try:
                result = await self.cache.fetch(
                    key, lambda: self._compute(request), QUOTE_CODEC, TtlClass.MEDIUM
                )
            except QuoteError as exc:
                logger.info("quote_rejected", code=exc.code, reason=exc.message, key=key)
                raise

            span.set_attribute("quote.cache_hit", result.hit)
            logger.debug("quote_served", key=key, cache=result.outcome.value)
            return result.value

    async def _compute(self, request: QuoteRequest) -> Quote:
        snapshot = await self.load_snapshot()
        quote = compute_quote(
            request,
            snapshot,
            currency=self.pricing.currency,
            minor_unit=self.pricing.minor_unit,
        )
        logger.info(
            "quote_computed",
            rule_id=quote.matched_rule_id,
            tier_id=quote.discount_tier_id,
            total=str(quote.total),
            summary=quote.display(self.pricing.currency_symbol),
        )
        return quote

    async def quote_order(self, lines: Iterable[QuoteRequest]) -> OrderQuote:
        """Price every line with the order-level item count applied to each."""
        requests = list(lines)
        item_count = sum(r.quantity for r in requests)
        quotes = [
            await self.compute_quote(r.model_copy(update={"order_item_count": item_count}))
            for r in requests
        ]
        return summarize_order(quotes, currency=self.pricing.currency)

    # -- Invalidation --

    async def invalidate(self, entity: MutatedEntity) -> int:
        """Hook for the admin workflow after mutating `entity`."""
        return await self.cache.invalidate(self.keys.invalidation_prefixes(entity))
