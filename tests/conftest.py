"""Pytest configuration and fixtures for workhub.

Environment is set before anything under workhub is imported: settings are
validated on first use and workhub.main builds the app at import time.
HTTP tests run the real lifespan against a file-backed SQLite database.
"""

import os
import tempfile
from dataclasses import dataclass

_TMP_ROOT = tempfile.mkdtemp(prefix="workhub-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_ROOT}/default.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("STORAGE_ROOT", os.path.join(_TMP_ROOT, "storage"))
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Session  # noqa: E402

from workhub.core.config import get_settings  # noqa: E402
from workhub.core.lifespan import create_lifespan  # noqa: E402
from workhub.core.limiter import limiter  # noqa: E402
from workhub.infrastructure.persistence import database  # noqa: E402
from workhub.infrastructure.persistence.database import Base  # noqa: E402
from workhub.infrastructure.persistence.models import (  # noqa: E402
    Project,
    ProjectMember,
    Space,
    SpaceMember,
    User,
)
from workhub.infrastructure.security import create_access_token  # noqa: E402
from workhub.main import app  # noqa: E402

limiter.enabled = False


@dataclass(frozen=True)
class World:
    """IDs of the seeded users, space and projects.

    owner: OWNER of the space and of project. pm: system PROJECT_MANAGER,
    space member only. alice, bob, carol: members of the space and project.
    alice also owns side_project.
    """

    space: str = "space-1"
    project: str = "project-1"
    side_project: str = "project-2"
    owner: str = "user-owner"
    pm: str = "user-pm"
    alice: str = "user-alice"
    bob: str = "user-bob"
    carol: str = "user-carol"
    outsider: str = "user-outsider"


WORLD = World()


def _seed_rows(w: World) -> list:
    users = [
        User(id=w.owner, email="owner@example.com", full_name="Olivia Owner"),
        User(
            id=w.pm,
            email="pm@example.com",
            full_name="Pat Manager",
            system_role="PROJECT_MANAGER",
        ),
        User(id=w.alice, email="alice@example.com", full_name="Alice"),
        User(id=w.bob, email="bob@example.com", full_name="Bob"),
        User(id=w.carol, email="carol@example.com", full_name=""),
        User(id=w.outsider, email="outsider@example.com", full_name="Outsider"),
    ]
    space = Space(id=w.space, name="Engineering")
    projects = [
        Project(id=w.project, space_id=w.space, name="Platform"),
        Project(id=w.side_project, space_id=w.space, name="Tooling"),
    ]
    space_members = [
        SpaceMember(space_id=w.space, user_id=w.owner, role="OWNER"),
        SpaceMember(space_id=w.space, user_id=w.pm, role="MEMBER"),
        SpaceMember(space_id=w.space, user_id=w.alice, role="MEMBER"),
        SpaceMember(space_id=w.space, user_id=w.bob, role="MEMBER"),
        SpaceMember(space_id=w.space, user_id=w.carol, role="MEMBER"),
    ]
    project_members = [
        ProjectMember(project_id=w.project, user_id=w.owner, role="OWNER"),
        ProjectMember(project_id=w.project, user_id=w.alice, role="MEMBER"),
        ProjectMember(project_id=w.project, user_id=w.bob, role="MEMBER"),
        ProjectMember(project_id=w.project, user_id=w.carol, role="MEMBER"),
        ProjectMember(project_id=w.side_project, user_id=w.alice, role="OWNER"),
        ProjectMember(project_id=w.side_project, user_id=w.bob, role="MEMBER"),
    ]
    return [*users, space, *projects, *space_members, *project_members]


@pytest.fixture
def world() -> World:
    return WORLD


@pytest.fixture
async def sqlite_engine(tmp_path) -> AsyncEngine:
    """File-backed SQLite engine with the full schema, disposed after the test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'workhub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=sqlite_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def seeded(session_factory, world: World) -> World:
    """Commit the users, space, projects and memberships described by World."""
    async with session_factory() as session:
        async with session.begin():
            session.add_all(_seed_rows(world))
    return world


@pytest.fixture
async def db_session(session_factory, seeded) -> AsyncSession:
    """Session on the seeded database for repository tests. Rolls back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(sqlite_engine, session_factory, seeded) -> AsyncClient:
    """Async HTTP client against the app, with startup and shutdown run around it."""
    database.engine = sqlite_engine
    database.AsyncSessionLocal = session_factory
    async with create_lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


def auth_headers(user_id: str) -> dict[str, str]:
    """Bearer header for user_id."""
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def sync_seeded_database(tmp_path, world: World, monkeypatch):
    """Seeded SQLite file for tests driving the app through starlette's TestClient.

    TestClient runs the app on its own event loop, so the engine is left unset
    and created lazily from DATABASE_URL inside that loop.
    """
    path = tmp_path / "workhub-sync.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session, session.begin():
        session.add_all(_seed_rows(world))
    engine.dispose()
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    get_settings.cache_clear()
    database.engine = None
    database.AsyncSessionLocal = None
    yield world
    get_settings.cache_clear()
