"""User lookups. Implements IPrincipalDirectory."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.domain.value_objects import Principal
from workhub.infrastructure.persistence.models.user import User


def _user_to_principal(u: User) -> Principal:
    """Map ORM User to Principal; display name falls back to the email."""
    return Principal(
        id=u.id,
        display_name=u.full_name or u.email,
        system_role=u.system_role,
    )


class SqlPrincipalDirectory:
    """Resolves principals from app_user. Inactive users are treated as unknown."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_principal(self, principal_id: str) -> Principal | None:
        result = await self.db.execute(
            select(User).where(User.id == principal_id, User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        return _user_to_principal(user) if user else None

    async def display_name(self, principal_id: str) -> str | None:
        principal = await self.get_principal(principal_id)
        return principal.display_name if principal else None

    async def ids_with_system_roles(self, roles: Collection[str]) -> list[str]:
        if not roles:
            return []
        result = await self.db.execute(
            select(User.id)
            .where(User.system_role.in_(list(roles)), User.is_active.is_(True))
            .order_by(User.created_at, User.id)
        )
        return list(result.scalars().all())
