"""Seed a local WorkHub database with a space, two projects and a few users.

Creates (when missing) one space owner, one system project manager and three
members, adds them to the space and the first project, and prints a bearer
token per user so the API can be exercised right away.

Usage:
    uv run python -m scripts.seed_dev_data

Requires: DATABASE_URL and SECRET_KEY (read from .env), schema migrated
(alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

SPACE_NAME = "Engineering"
PROJECT_NAMES = ("Platform", "Tooling")

# (email, full name, system role, space role, project role)
USERS = (
    ("owner@workhub.local", "Olivia Owner", "MEMBER", "OWNER", "OWNER"),
    ("pm@workhub.local", "Pat Manager", "PROJECT_MANAGER", "MEMBER", None),
    ("alice@workhub.local", "Alice Example", "MEMBER", "MEMBER", "MEMBER"),
    ("bob@workhub.local", "Bob Example", "MEMBER", "MEMBER", "MEMBER"),
    ("carol@workhub.local", "Carol Example", "MEMBER", "MEMBER", "MEMBER"),
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def _get_or_create_user(
    session: AsyncSession, email: str, full_name: str, system_role: str
):
    from workhub.infrastructure.persistence.models import User

    user = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if user is None:
        user = User(email=email, full_name=full_name, system_role=system_role)
        session.add(user)
        await session.flush()
        print(f"  User {email} -> {user.id}")
    else:
        print(f"  User {email} already exists, skip")
    return user


async def _get_or_create_named(session: AsyncSession, model, name: str, **extra):
    row = (await session.execute(select(model).where(model.name == name))).scalar_one_or_none()
    if row is None:
        row = model(name=name, **extra)
        session.add(row)
        await session.flush()
        print(f"  {model.__name__} {name} -> {row.id}")
    return row


async def _ensure_member(
    session: AsyncSession,
    model,
    scope_field: str,
    scope_id: str,
    user_id: str,
    role: str,
) -> None:
    column = getattr(model, scope_field)
    existing = (
        await session.execute(
            select(model).where(column == scope_id, model.user_id == user_id)
        )
    ).scalar_one_or_none()
    if existing is None:
        session.add(model(**{scope_field: scope_id}, user_id=user_id, role=role))


async def run() -> None:
    from workhub.infrastructure.persistence import database
    from workhub.infrastructure.persistence.models import (
        Project,
        ProjectMember,
        Space,
        SpaceMember,
    )
    from workhub.infrastructure.security import create_access_token

    tokens: list[tuple[str, str]] = []
    async with database.get_session_factory()() as session:
        async with session.begin():
            space = await _get_or_create_named(session, Space, SPACE_NAME)
            projects = [
                await _get_or_create_named(session, Project, name, space_id=space.id)
                for name in PROJECT_NAMES
            ]
            for email, full_name, system_role, space_role, project_role in USERS:
                user = await _get_or_create_user(session, email, full_name, system_role)
                await _ensure_member(session, SpaceMember, "space_id", space.id, user.id, space_role)
                if project_role:
                    await _ensure_member(
                        session, ProjectMember, "project_id", projects[0].id, user.id, project_role
                    )
                tokens.append((email, create_access_token({"sub": user.id})))

    await database.dispose_engine()
    print(f"Seed completed. Space {space.id}, project {projects[0].id}")
    for email, token in tokens:
        print(f"{email}\n  Bearer {token}")


def main() -> None:
    _load_env()
    try:
        asyncio.run(run())
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
