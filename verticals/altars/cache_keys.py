"""Cache key namespaces for the altar pricing vertical.

Naming convention: entity:operation:identifier

    configuraciones:tipo:<kind>      available options of one kind   (long TTL)
    reglas_precio:all                active pricing rules            (long TTL)
    reglas_descuento:all             active discount tiers           (long TTL)
    items_extra:all                  available extras                (long TTL)
    items_extra:tipo:<c>             available extras of a category  (long TTL)
    precio:calc:<digest>             computed quote                  (medium TTL)

Invalidation is namespace-wide: any change to a rule, tier, extra or
option drops its own namespace and every cached quote.
"""

from core.cache.keys import KeyBuilder, canonical_decimal, canonical_pairs, digest
from verticals.altars.models.schemas import MutatedEntity, OptionKind, QuoteRequest

OPTIONS_NS = "configuraciones"
PRICING_RULES_NS = "reglas_precio"
DISCOUNT_TIERS_NS = "reglas_descuento"
EXTRAS_NS = "items_extra"
QUOTES_NS = "precio"


def canonical_quote_request(request: QuoteRequest) -> str:
    """Canonical form of everything that determines a Quote.

    Extras are sorted by id with duplicate ids merged, and decimals are
    normalized, so logically identical requests render identically.
    """
    return "|".join(
        [
            request.thickness_id,
            canonical_decimal(request.height),
            canonical_decimal(request.width),
            "1" if request.painted else "0",
            str(request.quantity),
            str(request.effective_order_item_count),
            canonical_pairs((e.item_id, e.quantity) for e in request.extras),
        ]
    )


class AltarCacheKeys(KeyBuilder):
    """Key derivation for every cached value in this vertical."""

    def options(self, kind: OptionKind) -> str:
        return self.key(OPTIONS_NS, "tipo", kind.value)

    def pricing_rules(self) -> str:
        return self.key(PRICING_RULES_NS, "all")

    def discount_tiers(self) -> str:
        return self.key(DISCOUNT_TIERS_NS, "all")

    def extras(self, category: str | None = None) -> str:
        if category is None:
            return self.key(EXTRAS_NS, "all")
        return self.key(EXTRAS_NS, "tipo", category)

    def quote(self, request: QuoteRequest) -> str:
        return self.key(QUOTES_NS, "calc", digest(canonical_quote_request(request)))

    def invalidation_prefixes(self, entity: MutatedEntity) -> list[str]:
        """Namespaces that may hold data derived from `entity`."""
        own = {
            MutatedEntity.PRICING_RULE: PRICING_RULES_NS,
            MutatedEntity.DISCOUNT_TIER: DISCOUNT_TIERS_NS,
            MutatedEntity.EXTRA_ITEM: EXTRAS_NS,
            MutatedEntity.CONFIGURATION_OPTION: OPTIONS_NS,
        }[entity]
        return [self.namespace(own), self.namespace(QUOTES_NS)]
