"""Reference catalogue: options, pricing bands, tiers and extras.

IDs are derived with uuid5 from stable natural keys, so the same seed
produces the same ids in every process (tests and fixtures rely on it).

seed_records() yields ORM rows for a database; seed_snapshot() builds the
equivalent PricingSnapshot without touching one.
"""

import uuid
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from verticals.altars.models.db_models import (
    ConfigurationOptionRecord,
    DiscountTierRecord,
    ExtraItemRecord,
    PricingRuleRecord,
)
from verticals.altars.models.schemas import (
    ConfigurationOption,
    DiscountTier,
    ExtraItem,
    OptionKind,
    PricingRule,
)
from verticals.altars.quotes import PricingSnapshot

_NAMESPACE = uuid.UUID("6f1c2a9e-8d3b-4f57-9a0e-2b7d41c3e5a8")


def seed_id(*parts: object) -> uuid.UUID:
    return uuid.uuid5(_NAMESPACE, "/".join(str(p) for p in parts))


D = Decimal

# (kind, value, unit, display order)
OPTIONS: list[tuple[OptionKind, Decimal, str, int]] = (
    [(OptionKind.THICKNESS, D(v), "mm", i) for i, v in enumerate(["3", "5", "6", "9"], start=1)]
    + [(OptionKind.HEIGHT, D(v), "cm", i) for i, v in enumerate(["30", "40", "50", "60", "70", "80"], start=1)]
    + [(OptionKind.WIDTH, D(v), "cm", i) for i, v in enumerate(["20", "25", "30", "35", "40", "45", "50"], start=1)]
)

THICKNESS_3MM = str(seed_id("option", OptionKind.THICKNESS.value, "3"))
THICKNESS_5MM = str(seed_id("option", OptionKind.THICKNESS.value, "5"))
THICKNESS_6MM = str(seed_id("option", OptionKind.THICKNESS.value, "6"))
THICKNESS_9MM = str(seed_id("option", OptionKind.THICKNESS.value, "9"))

# Bands shared by every thickness: (name, h_min, h_max, w_min, w_max)
BANDS = [
    ("small", D("30"), D("50"), D("20"), D("35")),
    ("medium", D("30"), D("50"), D("40"), D("50")),
    ("large", D("60"), D("80"), D("20"), D("50")),
]

# thickness mm -> {band: (base, painted)}
PRICES: dict[str, dict[str, tuple[Decimal, Decimal]]] = {
    "3": {"small": (D("250.00"), D("350.00")), "medium": (D("300.00"), D("420.00")), "large": (D("400.00"), D("560.00"))},
    "5": {"small": (D("300.00"), D("420.00")), "medium": (D("360.00"), D("504.00")), "large": (D("480.00"), D("672.00"))},
    "6": {"small": (D("350.00"), D("490.00")), "medium": (D("420.00"), D("588.00")), "large": (D("560.00"), D("784.00"))},
    "9": {"small": (D("450.00"), D("630.00")), "medium": (D("540.00"), D("756.00")), "large": (D("720.00"), D("1008.00"))},
}

# (min quantity, percentage, description)
TIERS = [
    (5, D("10.00"), "10% de descuento en pedidos de 5 o más altares"),
    (10, D("15.00"), "15% de descuento en pedidos de 10 o más altares"),
]

# (slug, name, description, price, category)
EXTRAS = [
    ("portaretrato", "Portaretrato Adicional", "Portaretrato extra en MDF", D("50.00"), "portaretrato"),
    ("calavera", "Calavera Decorativa", "Calavera adicional tallada en MDF", D("40.00"), "calavera"),
    ("vaso", "Vaso Decorativo", "Vaso en MDF para decoración", D("30.00"), "vaso"),
    ("pan", "Pan de Muerto MDF", "Pan de muerto decorativo en MDF", D("35.00"), "pan"),
    ("vela", "Vela Decorativa", "Vela tallada en MDF", D("45.00"), "other"),
    ("cruz", "Cruz Decorativa", "Cruz pequeña en MDF", D("40.00"), "other"),
]


def rule_id(thickness_mm: str, band: str) -> str:
    return str(seed_id("rule", thickness_mm, band))


def tier_id(min_quantity: int) -> str:
    return str(seed_id("tier", min_quantity))


def extra_id(slug: str) -> str:
    return str(seed_id("extra", slug))


# ---------------------------------------------------------------------------
# Snapshot form
# ---------------------------------------------------------------------------

def seed_options() -> list[ConfigurationOption]:
    return [
        ConfigurationOption(
            id=str(seed_id("option", kind.value, value)),
            kind=kind,
            value=value,
            unit=unit,
            display_order=order,
        )
        for kind, value, unit, order in OPTIONS
    ]


def seed_pricing_rules() -> list[PricingRule]:
    rules = []
    for mm, by_band in PRICES.items():
        thickness = str(seed_id("option", OptionKind.THICKNESS.value, mm))
        for name, h_min, h_max, w_min, w_max in BANDS:
            base, painted = by_band[name]
            rules.append(
                PricingRule(
                    id=rule_id(mm, name),
                    thickness_id=thickness,
                    height_min=h_min,
                    height_max=h_max,
                    width_min=w_min,
                    width_max=w_max,
                    base_price=base,
                    painted_price=painted,
                )
            )
    return rules


def seed_discount_tiers() -> list[DiscountTier]:
    return [
        DiscountTier(id=tier_id(q), min_quantity=q, percentage=pct, description=desc)
        for q, pct, desc in TIERS
    ]


def seed_extras() -> list[ExtraItem]:
    return [
        ExtraItem(id=extra_id(slug), name=name, description=desc, price=price, category=cat)
        for slug, name, desc, price, cat in EXTRAS
    ]


def seed_snapshot() -> PricingSnapshot:
    options = seed_options()
    return PricingSnapshot.build(
        thickness_options=[o for o in options if o.kind == OptionKind.THICKNESS],
        pricing_rules=seed_pricing_rules(),
        discount_tiers=seed_discount_tiers(),
        extras=seed_extras(),
        height_options=[o for o in options if o.kind == OptionKind.HEIGHT],
        width_options=[o for o in options if o.kind == OptionKind.WIDTH],
    )


# ---------------------------------------------------------------------------
# Database form
# ---------------------------------------------------------------------------

def seed_records() -> list:
    records: list = []
    for o in seed_options():
        records.append(
            ConfigurationOptionRecord(
                id=uuid.UUID(o.id),
                kind=o.kind,
                value=o.value,
                unit=o.unit,
                available=o.available,
                display_order=o.display_order,
            )
        )
    for r in seed_pricing_rules():
        records.append(
            PricingRuleRecord(
                id=uuid.UUID(r.id),
                thickness_id=uuid.UUID(r.thickness_id),
                height_min=r.height_min,
                height_max=r.height_max,
                width_min=r.width_min,
                width_max=r.width_max,
                base_price=r.base_price,
                painted_price=r.painted_price,
                active=r.active,
            )
        )
    for t in seed_discount_tiers():
        records.append(
            DiscountTierRecord(
                id=uuid.UUID(t.id),
                min_quantity=t.min_quantity,
                percentage=t.percentage,
                description=t.description,
                active=t.active,
            )
        )
    for e in seed_extras():
        records.append(
            ExtraItemRecord(
                id=uuid.UUID(e.id),
                name=e.name,
                description=e.description,
                price=e.price,
                category=e.category,
                available=e.available,
            )
        )
    return records


async def seed_database(session: AsyncSession) -> int:
    """Insert the reference catalogue. Returns rows added."""
    records = seed_records()
    session.add_all(records)
    await session.flush()
    return len(records)
