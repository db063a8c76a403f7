"""Membership resolver and principal directory against SQLite."""

import pytest
from sqlalchemy import update

from workhub.infrastructure.persistence.models import User
from workhub.infrastructure.persistence.repositories import (
    SqlMembershipResolver,
    SqlPrincipalDirectory,
)

pytestmark = pytest.mark.integration


async def test_roles(db_session, world) -> None:
    membership = SqlMembershipResolver(db_session)
    assert await membership.space_role(world.owner, world.space) == "OWNER"
    assert await membership.space_role(world.bob, world.space) == "MEMBER"
    assert await membership.project_role(world.alice, world.side_project) == "OWNER"
    assert await membership.project_role(world.outsider, world.project) is None


async def test_member_lists(db_session, world) -> None:
    membership = SqlMembershipResolver(db_session)
    assert set(await membership.space_member_ids(world.space)) == {
        world.owner,
        world.pm,
        world.alice,
        world.bob,
        world.carol,
    }
    assert set(await membership.project_member_ids(world.project)) == {
        world.owner,
        world.alice,
        world.bob,
        world.carol,
    }
    assert await membership.project_owner_ids(world.project) == [world.owner]


async def test_project_ids_for(db_session, world) -> None:
    membership = SqlMembershipResolver(db_session)
    assert await membership.project_ids_for(world.alice, role="OWNER") == [world.side_project]
    assert await membership.project_ids_for(world.bob, space_id=world.space) == [
        world.project,
        world.side_project,
    ]
    assert await membership.project_ids_for(world.bob, space_id="elsewhere") == []


async def test_principal_directory(db_session, world) -> None:
    directory = SqlPrincipalDirectory(db_session)

    pm = await directory.get_principal(world.pm)
    assert pm is not None
    assert pm.display_name == "Pat Manager"
    assert pm.system_role == "PROJECT_MANAGER"

    assert await directory.display_name(world.carol) == "carol@example.com"
    assert await directory.get_principal("ghost") is None
    assert await directory.ids_with_system_roles({"PROJECT_MANAGER"}) == [world.pm]
    assert await directory.ids_with_system_roles(set()) == []


async def test_inactive_user_is_unknown(db_session, world) -> None:
    await db_session.execute(update(User).where(User.id == world.bob).values(is_active=False))
    directory = SqlPrincipalDirectory(db_session)
    assert await directory.get_principal(world.bob) is None
