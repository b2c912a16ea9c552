"""Pydantic schemas for the pricing core.

Two groups:
- Snapshot models (ConfigurationOption, PricingRule, DiscountTier,
  ExtraItem): immutable copies of stored rows. These are what the pure
  pricing functions consume and what the cache stores.
- Request/response models (QuoteRequest, Quote, OrderQuote...): the
  calculation API. Inbound JSON may use camelCase (thicknessId) or
  snake_case; responses are rendered in camelCase.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

from verticals.altars.formatting import format_currency


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OptionKind(str, Enum):
    """Configurable dimension. Values are the stored `config_type` labels."""

    THICKNESS = "grosor"
    HEIGHT = "altura"
    WIDTH = "anchura"

    @classmethod
    def parse(cls, label: str) -> "OptionKind":
        """Accept either the English name (`thickness`) or the stored value (`grosor`)."""
        normalized = label.strip().lower()
        for kind in cls:
            if normalized in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown option kind: {label!r}")


class MutatedEntity(str, Enum):
    """Entities whose admin mutation invalidates cached data."""

    PRICING_RULE = "pricing_rule"
    DISCOUNT_TIER = "discount_tier"
    EXTRA_ITEM = "extra_item"
    CONFIGURATION_OPTION = "configuration_option"


# ---------------------------------------------------------------------------
# Snapshot models
# ---------------------------------------------------------------------------

class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ConfigurationOption(_Snapshot):
    id: str
    kind: OptionKind
    value: Decimal
    unit: str
    available: bool = True
    display_order: int = 0


class PricingRule(_Snapshot):
    id: str
    thickness_id: str
    height_min: Decimal
    height_max: Decimal
    width_min: Decimal
    width_max: Decimal
    base_price: Decimal = Field(..., gt=0)
    painted_price: Decimal = Field(..., gt=0)
    active: bool = True

    @model_validator(mode="after")
    def _check_ranges(self) -> "PricingRule":
        if self.height_max < self.height_min:
            raise ValueError("height_max must be >= height_min")
        if self.width_max < self.width_min:
            raise ValueError("width_max must be >= width_min")
        return self

    def covers(self, height: Decimal, width: Decimal) -> bool:
        """Inclusive containment of (height, width) in this band."""
        return (
            self.height_min <= height <= self.height_max
            and self.width_min <= width <= self.width_max
        )

    @property
    def area(self) -> Decimal:
        return (self.height_max - self.height_min) * (self.width_max - self.width_min)


class DiscountTier(_Snapshot):
    id: str
    min_quantity: int = Field(..., gt=0)
    percentage: Decimal = Field(..., ge=0, le=100)
    description: Optional[str] = None
    active: bool = True


class ExtraItem(_Snapshot):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    category: str
    available: bool = True


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ExtraSelection(BaseModel):
    """One extra item and how many of it go with each configured unit.

    Accepts `{"itemId": ..., "quantity": ...}` or a two-element
    `[item_id, quantity]` pair.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    item_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"item_id": data[0], "quantity": data[1]}
        return data


class QuoteRequest(BaseModel):
    """Inbound calculation request for one configured line."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    thickness_id: str = Field(..., min_length=1)
    # Same precision as the Numeric(10, 2) option columns
    height: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    width: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    painted: bool = False
    quantity: int = Field(1, ge=1)
    extras: list[ExtraSelection] = Field(
        default_factory=list,
        validation_alias=AliasChoices("extras", "extraItemIds", "extra_item_ids"),
    )
    order_item_count: Optional[int] = Field(None, ge=1)

    @property
    def effective_order_item_count(self) -> int:
        """Items in the whole order; defaults to this line's quantity."""
        return self.order_item_count if self.order_item_count is not None else self.quantity


class OrderQuoteRequest(BaseModel):
    lines: list[QuoteRequest] = Field(..., min_length=1)


class InvalidateRequest(BaseModel):
    entity: MutatedEntity


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class Quote(BaseModel):
    """Priced outcome for one line. total = line_subtotal - discount_amount."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    unit_price: Decimal
    extras_total: Decimal
    quantity: int
    line_subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    total: Decimal
    matched_rule_id: Optional[str] = None
    discount_tier_id: Optional[str] = None
    currency: str = "MXN"

    def display(self, symbol: str = "$") -> str:
        """One-line human summary, e.g. for order confirmations."""
        parts = [
            f"{self.quantity} x {format_currency(self.unit_price + self.extras_total, symbol)}",
            f"subtotal {format_currency(self.line_subtotal, symbol)}",
        ]
        if self.discount_amount > 0:
            parts.append(
                f"descuento {self.discount_percentage.normalize():f}% "
                f"-{format_currency(self.discount_amount, symbol)}"
            )
        parts.append(f"total {format_currency(self.total, symbol)} {self.currency}")
        return ", ".join(parts)


class OrderQuote(BaseModel):
    """Priced outcome for a whole order (several configured lines)."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    lines: list[Quote]
    item_count: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    currency: str = "MXN"


class InvalidateResponse(BaseModel):
    entity: MutatedEntity
    deleted: int
