"""Async repository pattern for read-side database access.

Provides a generic base repository exposing the filtered-select contract
the pricing core needs (`select rows matching predicate`), with driver
errors translated into RepositoryUnavailable. Verticals subclass this to
add domain-specific queries.

Example: RuleRepository extending BaseRepository.
"""

import asyncio
from typing import Any, Generic, Sequence, TypeVar

import structlog
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import RepositoryUnavailable
from core.models.base import Base

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with filtered reads.

    Subclass and set `model` (and `active_column` if the table has an
    availability flag) to your SQLAlchemy model::

        class ExtraItemRepository(BaseRepository[ExtraItem]):
            model = ExtraItem
            active_column = "available"

            async def list_for_category(self, category: str):
                return await self.select_active(
                    filters={"category": category},
                    order_by=[ExtraItem.name],
                )
    """

    model: type[ModelT]
    active_column: str | None = None

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- Execution with error translation --

    async def _scalars(self, stmt: Select, operation: str) -> list[ModelT]:
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.error(
                "repository_unavailable",
                table=self.model.__tablename__,
                operation=operation,
                error=repr(exc),
            )
            raise RepositoryUnavailable(
                f"Failed to read {self.model.__tablename__}",
                operation=operation,
            ) from exc

    # -- Filtered select --

    async def select_active(
        self,
        filters: dict[str, Any] | None = None,
        order_by: Sequence[Any] | None = None,
    ) -> list[ModelT]:
        """Select rows whose active flag is set and that match `filters`.

        Filters are equality predicates on column names; unknown columns
        raise ValueError (a programming error, not a data-store failure).
        """
        stmt = select(self.model)

        if self.active_column is not None:
            stmt = stmt.where(getattr(self.model, self.active_column).is_(True))

        if filters:
            for col_name, value in filters.items():
                if not hasattr(self.model, col_name):
                    raise ValueError(
                        f"{self.model.__name__} has no column {col_name!r}"
                    )
                if value is not None:
                    stmt = stmt.where(getattr(self.model, col_name) == value)

        if order_by:
            stmt = stmt.order_by(*order_by)

        return await self._scalars(stmt, operation=f"select_active:{self.model.__tablename__}")
