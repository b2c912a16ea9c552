"""SQLAlchemy models for the altar pricing vertical.

Table and column names match the storefront's existing schema
(configuraciones, reglas_precio, reglas_descuento, items_extra); Python
attribute names are English. Each model provides to_dict(), the standard
serialisation interface used by repositories to build pydantic schemas.

Note: reglas_precio has no uniqueness constraint across ranges, so bands
of one thickness may overlap. Resolution handles that explicitly.
"""

import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.models.base import AuditMixin, Base
from verticals.altars.models.schemas import OptionKind


class ConfigurationOptionRecord(AuditMixin, Base):
    """One selectable value of one dimension (thickness, height, width)."""

    __tablename__ = "configuraciones"
    __table_args__ = (
        UniqueConstraint("tipo", "valor", "unidad", name="unique_config_value"),
    )

    kind: Mapped[OptionKind] = mapped_column(
        "tipo",
        Enum(
            OptionKind,
            name="config_type",
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
        index=True,
    )
    value: Mapped[Decimal] = mapped_column("valor", Numeric(10, 2), nullable=False)
    unit: Mapped[str] = mapped_column("unidad", String(10), nullable=False)
    available: Mapped[bool] = mapped_column("disponible", Boolean, nullable=False, default=True)
    display_order: Mapped[int] = mapped_column("orden", Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "kind": self.kind,
            "value": self.value,
            "unit": self.unit,
            "available": self.available,
            "display_order": self.display_order,
        }


class PricingRuleRecord(AuditMixin, Base):
    """A priced (height x width) band for one thickness."""

    __tablename__ = "reglas_precio"
    __table_args__ = (
        CheckConstraint("altura_max >= altura_min", name="check_altura_range"),
        CheckConstraint("anchura_max >= anchura_min", name="check_anchura_range"),
        CheckConstraint(
            "precio_base > 0 AND precio_pintado > 0", name="check_positive_prices"
        ),
    )

    thickness_id: Mapped[uuid.UUID] = mapped_column(
        "grosor_id",
        Uuid(as_uuid=True),
        ForeignKey("configuraciones.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    height_min: Mapped[Decimal] = mapped_column("altura_min", Numeric(10, 2), nullable=False)
    height_max: Mapped[Decimal] = mapped_column("altura_max", Numeric(10, 2), nullable=False)
    width_min: Mapped[Decimal] = mapped_column("anchura_min", Numeric(10, 2), nullable=False)
    width_max: Mapped[Decimal] = mapped_column("anchura_max", Numeric(10, 2), nullable=False)
    base_price: Mapped[Decimal] = mapped_column("precio_base", Numeric(10, 2), nullable=False)
    painted_price: Mapped[Decimal] = mapped_column("precio_pintado", Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column("activo", Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "thickness_id": str(self.thickness_id),
            "height_min": self.height_min,
            "height_max": self.height_max,
            "width_min": self.width_min,
            "width_max": self.width_max,
            "base_price": self.base_price,
            "painted_price": self.painted_price,
            "active": self.active,
        }


class DiscountTierRecord(AuditMixin, Base):
    """A quantity threshold mapped to a percentage discount."""

    __tablename__ = "reglas_descuento"
    __table_args__ = (
        CheckConstraint("cantidad_minima > 0", name="check_min_quantity"),
        CheckConstraint(
            "porcentaje_descuento >= 0 AND porcentaje_descuento <= 100",
            name="check_discount_percentage",
        ),
    )

    min_quantity: Mapped[int] = mapped_column("cantidad_minima", Integer, nullable=False)
    percentage: Mapped[Decimal] = mapped_column("porcentaje_descuento", Numeric(5, 2), nullable=False)
    description: Mapped[str | None] = mapped_column("descripcion", Text, nullable=True)
    active: Mapped[bool] = mapped_column("activo", Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "min_quantity": self.min_quantity,
            "percentage": self.percentage,
            "description": self.description,
            "active": self.active,
        }


class ExtraItemRecord(AuditMixin, Base):
    """An optional add-on (extra photo frame, skull, candle...)."""

    __tablename__ = "items_extra"
    __table_args__ = (
        CheckConstraint("precio > 0", name="check_positive_price"),
    )

    name: Mapped[str] = mapped_column("nombre", String(255), nullable=False)
    description: Mapped[str | None] = mapped_column("descripcion", Text, nullable=True)
    price: Mapped[Decimal] = mapped_column("precio", Numeric(10, 2), nullable=False)
    image: Mapped[str | None] = mapped_column("imagen", Text, nullable=True)
    category: Mapped[str] = mapped_column("tipo", String(50), nullable=False, index=True)
    available: Mapped[bool] = mapped_column("disponible", Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "available": self.available,
        }
