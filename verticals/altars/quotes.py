"""Quote calculator: composes price resolution, extras and discounts.

compute_quote() is pure: given the same QuoteRequest and the same
PricingSnapshot it always returns an equal Quote. All arithmetic is
Decimal. The line subtotal is carried unrounded into the discount step;
rounding happens there and when amounts are fixed to the currency's
minor unit for output. The total is the fixed subtotal minus the discount,
which is itself a whole number of minor units no larger than that
subtotal, so total == line_subtotal - discount_amount exactly and total >= 0.

Validation order: thickness, rule resolution, then height and width
against the catalogue. A point no band covers is NoRuleMatchedError even
when it is also off-catalogue; a covered point whose height or width
option is missing or disabled is InvalidConfigurationError.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from verticals.altars.errors import InvalidConfigurationError
from verticals.altars.models.schemas import (
    ConfigurationOption,
    DiscountTier,
    ExtraItem,
    ExtraSelection,
    OptionKind,
    OrderQuote,
    PricingRule,
    Quote,
    QuoteRequest,
)
from verticals.altars.rules import CENTS, ZERO, apply_discount, resolve_price_rule, unit_price


def _available_values(options: Iterable[ConfigurationOption], kind: OptionKind) -> frozenset[Decimal]:
    return frozenset(o.value for o in options if o.kind == kind and o.available)


@dataclass(frozen=True)
class PricingSnapshot:
    """Everything a quote depends on, as read from the catalog and rule repositories."""

    thickness_options: Mapping[str, ConfigurationOption] = field(default_factory=dict)
    pricing_rules: tuple[PricingRule, ...] = ()
    discount_tiers: tuple[DiscountTier, ...] = ()
    extras: Mapping[str, ExtraItem] = field(default_factory=dict)
    height_values: frozenset[Decimal] = frozenset()
    width_values: frozenset[Decimal] = frozenset()

    @classmethod
    def build(
        cls,
        thickness_options: Iterable[ConfigurationOption],
        pricing_rules: Iterable[PricingRule],
        discount_tiers: Iterable[DiscountTier],
        extras: Iterable[ExtraItem],
        height_options: Iterable[ConfigurationOption] = (),
        width_options: Iterable[ConfigurationOption] = (),
    ) -> "PricingSnapshot":
        return cls(
            thickness_options={o.id: o for o in thickness_options},
            pricing_rules=tuple(pricing_rules),
            discount_tiers=tuple(discount_tiers),
            extras={e.id: e for e in extras},
            height_values=_available_values(height_options, OptionKind.HEIGHT),
            width_values=_available_values(width_options, OptionKind.WIDTH),
        )


def merge_extras(selections: Iterable[ExtraSelection]) -> list[tuple[str, int]]:
    """Sum quantities per item id, sorted by id."""
    merged: dict[str, int] = {}
    for sel in selections:
        merged[sel.item_id] = merged.get(sel.item_id, 0) + sel.quantity
    return sorted(merged.items())


def _validate(request: QuoteRequest, snapshot: PricingSnapshot) -> None:
    if request.quantity < 1:
        raise InvalidConfigurationError("quantity", "must be at least 1")
    if request.effective_order_item_count < request.quantity:
        raise InvalidConfigurationError(
            "order_item_count",
            f"order has {request.effective_order_item_count} items but this line alone has {request.quantity}",
        )
    if request.height <= ZERO or request.width <= ZERO:
        raise InvalidConfigurationError("dimensions", "height and width must be positive")

    option = snapshot.thickness_options.get(request.thickness_id)
    if option is None or option.kind != OptionKind.THICKNESS or not option.available:
        raise InvalidConfigurationError(
            "thickness_id", f"{request.thickness_id} is not an available thickness"
        )


def _validate_dimensions(request: QuoteRequest, snapshot: PricingSnapshot) -> None:
    if request.height not in snapshot.height_values:
        raise InvalidConfigurationError("height", f"{request.height} is not an available height")
    if request.width not in snapshot.width_values:
        raise InvalidConfigurationError("width", f"{request.width} is not an available width")


def _extras_total(request: QuoteRequest, snapshot: PricingSnapshot) -> Decimal:
    total = ZERO
    for item_id, qty in merge_extras(request.extras):
        if qty < 1:
            raise InvalidConfigurationError("extras", f"{item_id} quantity must be at least 1")
        item = snapshot.extras.get(item_id)
        if item is None or not item.available:
            raise InvalidConfigurationError("extras", f"{item_id} is not an available extra item")
        total += item.price * qty
    return total


def compute_quote(
    request: QuoteRequest,
    snapshot: PricingSnapshot,
    currency: str = "MXN",
    minor_unit: Decimal = CENTS,
) -> Quote:
    """Price one configured line.

    Raises InvalidConfigurationError for malformed or unavailable
    selections and NoRuleMatchedError when the dimensions are not sellable.
    """
    _validate(request, snapshot)

    rule = resolve_price_rule(
        snapshot.pricing_rules, request.thickness_id, request.height, request.width
    )
    _validate_dimensions(request, snapshot)
    price = unit_price(rule, request.painted)
    extras_total = _extras_total(request, snapshot)

    line_subtotal = (price + extras_total) * request.quantity
    discount = apply_discount(
        snapshot.discount_tiers,
        request.effective_order_item_count,
        line_subtotal,
        minor_unit=minor_unit,
    )

    def fix(amount: Decimal) -> Decimal:
        return amount.quantize(minor_unit, rounding=ROUND_HALF_UP)

    subtotal = fix(line_subtotal)

    return Quote(
        unit_price=fix(price),
        extras_total=fix(extras_total),
        quantity=request.quantity,
        line_subtotal=subtotal,
        discount_percentage=discount.percentage,
        discount_amount=discount.amount,
        total=subtotal - discount.amount,
        matched_rule_id=rule.id,
        discount_tier_id=discount.tier.id if discount.tier is not None else None,
        currency=currency,
    )


def summarize_order(quotes: Iterable[Quote], currency: str = "MXN") -> OrderQuote:
    """Aggregate line quotes. total == subtotal - discount by construction."""
    lines = list(quotes)
    subtotal = sum((q.line_subtotal for q in lines), ZERO)
    discount = sum((q.discount_amount for q in lines), ZERO)
    return OrderQuote(
        lines=lines,
        item_count=sum(q.quantity for q in lines),
        subtotal=subtotal,
        discount=discount,
        total=subtotal - discount,
        currency=currency,
    )
