"""Membership lookups over space_member / project_member. Implements IMembershipResolver."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.domain.enums import MemberRole
from workhub.infrastructure.persistence.models.space import Project, ProjectMember, SpaceMember


class SqlMembershipResolver:
    """Resolves space/project roles from the membership tables."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def space_role(self, principal_id: str, space_id: str) -> str | None:
        result = await self.db.execute(
            select(SpaceMember.role).where(
                SpaceMember.space_id == space_id, SpaceMember.user_id == principal_id
            )
        )
        return result.scalar_one_or_none()

    async def project_role(self, principal_id: str, project_id: str) -> str | None:
        result = await self.db.execute(
            select(ProjectMember.role).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == principal_id,
            )
        )
        return result.scalar_one_or_none()

    async def space_member_ids(self, space_id: str) -> list[str]:
        result = await self.db.execute(
            select(SpaceMember.user_id)
            .where(SpaceMember.space_id == space_id)
            .order_by(SpaceMember.created_at, SpaceMember.user_id)
        )
        return list(result.scalars().all())

    async def project_member_ids(self, project_id: str) -> list[str]:
        result = await self.db.execute(
            select(ProjectMember.user_id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.created_at, ProjectMember.user_id)
        )
        return list(result.scalars().all())

    async def project_owner_ids(self, project_id: str) -> list[str]:
        result = await self.db.execute(
            select(ProjectMember.user_id)
            .where(
                ProjectMember.project_id == project_id,
                ProjectMember.role == MemberRole.OWNER.value,
            )
            .order_by(ProjectMember.created_at, ProjectMember.user_id)
        )
        return list(result.scalars().all())

    async def project_ids_for(
        self,
        principal_id: str,
        role: str | None = None,
        space_id: str | None = None,
    ) -> list[str]:
        stmt = select(ProjectMember.project_id).where(ProjectMember.user_id == principal_id)
        if role is not None:
            stmt = stmt.where(ProjectMember.role == role)
        if space_id is not None:
            stmt = stmt.join(Project, Project.id == ProjectMember.project_id).where(
                Project.space_id == space_id
            )
        result = await self.db.execute(stmt.order_by(ProjectMember.project_id))
        return list(result.scalars().all())
