"""Base model and mixins for all SQLAlchemy models.

Provides:
- Base: Declarative base class for all models
- AuditMixin: Adds UUID primary key and timestamps

Every table inherits from Base and includes AuditMixin. The UUID column
uses the generic Uuid type so the same models run on PostgreSQL and on
SQLite in tests.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


class AuditMixin:
    """Mixin providing a UUID primary key and standard audit columns.

    Adds:
    - id: UUID primary key (auto-generated)
    - created_at: Timestamp set on insert
    - updated_at: Timestamp updated on every change
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
