"""Altar repositories: async reads of options, rules, tiers and extras.

Extends BaseRepository with the queries the pricing core needs. Every
method returns immutable pydantic snapshots (never ORM rows), so results
can be cached and handed to pure pricing functions. Data-store failures
surface as RepositoryUnavailable; nothing is retried here.
"""

from typing import Protocol

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from patterns.repository import BaseRepository
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


# ---------------------------------------------------------------------------
# Contracts (what the pricing service depends on)
# ---------------------------------------------------------------------------

class CatalogSource(Protocol):
    async def list_options(self, kind: OptionKind) -> list[ConfigurationOption]: ...


class RuleSource(Protocol):
    async def list_active_pricing_rules(self) -> list[PricingRule]: ...

    async def list_active_discount_tiers(self) -> list[DiscountTier]: ...

    async def list_available_extras(self, category: str | None = None) -> list[ExtraItem]: ...


# ---------------------------------------------------------------------------
# Configuration catalog
# ---------------------------------------------------------------------------

class CatalogRepository(BaseRepository[ConfigurationOptionRecord]):
    """Enumerated option sets (thickness, height, width)."""

    model = ConfigurationOptionRecord
    active_column = "available"

    async def list_options(self, kind: OptionKind) -> list[ConfigurationOption]:
        """Available options of one kind, by display order ascending."""
        rows = await self.select_active(
            filters={"kind": kind},
            order_by=[
                ConfigurationOptionRecord.display_order,
                ConfigurationOptionRecord.value,
                ConfigurationOptionRecord.id,
            ],
        )
        return [ConfigurationOption.model_validate(r.to_dict()) for r in rows]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

class PricingRuleRepository(BaseRepository[PricingRuleRecord]):
    model = PricingRuleRecord
    active_column = "active"


class DiscountTierRepository(BaseRepository[DiscountTierRecord]):
    model = DiscountTierRecord
    active_column = "active"


class ExtraItemRepository(BaseRepository[ExtraItemRecord]):
    model = ExtraItemRecord
    active_column = "available"


class RuleRepository:
    """Active pricing rules, discount tiers and extras for one session."""

    def __init__(self, session: AsyncSession):
        self.pricing_rules = PricingRuleRepository(session)
        self.discount_tiers = DiscountTierRepository(session)
        self.extra_items = ExtraItemRepository(session)

    async def list_active_pricing_rules(self) -> list[PricingRule]:
        rows = await self.pricing_rules.select_active(order_by=[PricingRuleRecord.id])
        return [PricingRule.model_validate(r.to_dict()) for r in rows]

    async def list_active_discount_tiers(self) -> list[DiscountTier]:
        rows = await self.discount_tiers.select_active(
            order_by=[DiscountTierRecord.min_quantity, DiscountTierRecord.id]
        )
        return [DiscountTier.model_validate(r.to_dict()) for r in rows]

    async def list_available_extras(self, category: str | None = None) -> list[ExtraItem]:
        rows = await self.extra_items.select_active(
            filters={"category": category},
            order_by=[ExtraItemRecord.category, ExtraItemRecord.name, ExtraItemRecord.id],
        )
        return [ExtraItem.model_validate(r.to_dict()) for r in rows]


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_catalog_repository(
    session: AsyncSession = Depends(get_session),
) -> CatalogRepository:
    """FastAPI dependency for CatalogRepository."""
    return CatalogRepository(session)


def get_rule_repository(
    session: AsyncSession = Depends(get_session),
) -> RuleRepository:
    """FastAPI dependency for RuleRepository."""
    return RuleRepository(session)
