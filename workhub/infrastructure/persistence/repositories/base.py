"""Base repository: shared lookup and write helpers for ORM-backed repositories."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from workhub.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get_model, add and count helpers.

    Subclasses map models to application DTOs; the ORM instance never leaves
    the repository.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_model(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def add(self, obj: ModelType) -> ModelType:
        """Persist a new record and reload server-side defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def count(self, stmt: Select[Any]) -> int:
        """Total rows the statement would return, ignoring ordering and paging."""
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).limit(None).offset(None).subquery()
        )
        result = await self.db.execute(count_stmt)
        return int(result.scalar_one())
