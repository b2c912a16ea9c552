"""Altar pricing rules: pure functions.

Rules are stateless functions over rule snapshots. No database, no cache,
no clock. This makes them:
- Trivially testable (pure input/output)
- Safe under arbitrary concurrency
- Reproducible (identical inputs -> identical outputs, any process)

Two engines live here:

Price resolution
    resolve_price_rule() picks the band covering (height, width) for a
    thickness. Bands may overlap because the rule table has no uniqueness
    constraint across ranges. Overlaps are resolved by policy, never by
    storage order: the narrowest band wins, where narrowness is the area
    (height_max - height_min) * (width_max - width_min); equal areas fall
    back to the lexicographically smallest rule id.

Discount tiers
    apply_discount() picks, among active tiers whose min_quantity is met,
    the one with the largest min_quantity (tiers do not stack). Equal
    thresholds fall back to the smallest tier id. The amount is rounded
    HALF_UP to the currency's minor unit and clamped to [0, subtotal], the
    subtotal itself taken at the minor unit.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from verticals.altars.errors import NoRuleMatchedError
from verticals.altars.models.schemas import DiscountTier, PricingRule

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Price resolution
# ---------------------------------------------------------------------------

def matching_rules(
    rules: Iterable[PricingRule],
    thickness_id: str,
    height: Decimal,
    width: Decimal,
) -> list[PricingRule]:
    """All active rules for `thickness_id` whose band contains the point."""
    return [
        r for r in rules
        if r.active and r.thickness_id == thickness_id and r.covers(height, width)
    ]


def _narrowest_first(rule: PricingRule) -> tuple[Decimal, str]:
    return (rule.area, rule.id)


def resolve_price_rule(
    rules: Iterable[PricingRule],
    thickness_id: str,
    height: Decimal,
    width: Decimal,
) -> PricingRule:
    """Return the rule pricing (thickness, height, width).

    Raises NoRuleMatchedError when no active band covers the point. That is
    a terminal outcome: the dimensions are not sellable.
    """
    candidates = matching_rules(rules, thickness_id, height, width)
    if not candidates:
        raise NoRuleMatchedError(thickness_id, height, width)
    return min(candidates, key=_narrowest_first)


def unit_price(rule: PricingRule, painted: bool) -> Decimal:
    return rule.painted_price if painted else rule.base_price


def _intervals_overlap(lo1: Decimal, hi1: Decimal, lo2: Decimal, hi2: Decimal) -> bool:
    return lo1 <= hi2 and lo2 <= hi1


def find_overlapping_rules(rules: Iterable[PricingRule]) -> list[tuple[PricingRule, PricingRule]]:
    """Pairs of active rules of the same thickness whose bands intersect.

    For admin tooling: overlaps are legal but usually unintended.
    Pairs are ordered by rule id.
    """
    active = sorted((r for r in rules if r.active), key=lambda r: r.id)
    overlaps: list[tuple[PricingRule, PricingRule]] = []
    for i, a in enumerate(active):
        for b in active[i + 1:]:
            if a.thickness_id != b.thickness_id:
                continue
            if _intervals_overlap(a.height_min, a.height_max, b.height_min, b.height_max) and \
                    _intervals_overlap(a.width_min, a.width_max, b.width_min, b.width_max):
                overlaps.append((a, b))
    return overlaps


# ---------------------------------------------------------------------------
# Discount tiers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DiscountResult:
    """Outcome of the discount engine for one subtotal."""

    tier: Optional[DiscountTier]
    amount: Decimal

    @property
    def percentage(self) -> Decimal:
        return self.tier.percentage if self.tier is not None else ZERO


def select_discount_tier(tiers: Iterable[DiscountTier], item_count: int) -> Optional[DiscountTier]:
    """The active tier with the largest min_quantity <= item_count, if any."""
    eligible = [t for t in tiers if t.active and t.min_quantity <= item_count]
    if not eligible:
        return None
    # max threshold; ties -> smallest id
    return min(eligible, key=lambda t: (-t.min_quantity, t.id))


def apply_discount(
    tiers: Iterable[DiscountTier],
    item_count: int,
    subtotal: Decimal,
    minor_unit: Decimal = CENTS,
) -> DiscountResult:
    """Discount owed on `subtotal` for an order of `item_count` items."""
    tier = select_discount_tier(tiers, item_count)
    if tier is None or subtotal <= ZERO:
        return DiscountResult(tier=tier, amount=ZERO.quantize(minor_unit))

    pct = min(max(tier.percentage, ZERO), HUNDRED)
    amount = (subtotal * pct / HUNDRED).quantize(minor_unit, rounding=ROUND_HALF_UP)
    amount = min(max(amount, ZERO), subtotal.quantize(minor_unit, rounding=ROUND_HALF_UP))
    return DiscountResult(tier=tier, amount=amount)
