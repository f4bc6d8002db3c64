"""
Shared fixtures: an in-memory SQLite database per test, tenant scopes for
service-level tests and an HTTP client wired to the same database.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.database import enable_sqlite_foreign_keys, get_session
from app.core.tenancy import TenantScope
from app.main import app
from app.services import projects as project_service
from app.services import tasks as task_service
from app.services import tenants as tenant_service
from sitework_shared.schemas.projects import ProjectCreate
from sitework_shared.schemas.tasks import TaskCreate
from sitework_shared.schemas.tenants import TenantCreateRequest


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Tenants and scopes
# ---------------------------------------------------------------------------


async def _tenant(session: AsyncSession, slug: str, settings: dict | None = None):
    tenant = await tenant_service.create_tenant(
        TenantCreateRequest(name=slug.title(), slug=slug, settings=settings), session
    )
    await session.commit()
    return tenant


@pytest.fixture
async def tenant(session):
    return await _tenant(session, "acme-builders")


@pytest.fixture
async def other_tenant(session):
    return await _tenant(session, "rival-homes")


@pytest.fixture
def actor_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def scope(session, tenant, actor_id) -> TenantScope:
    return TenantScope(session, tenant, actor_id=actor_id)


@pytest.fixture
def other_scope(session, other_tenant) -> TenantScope:
    return TenantScope(session, other_tenant)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_project():
    async def _make(scope: TenantScope, name: str = "Maple Street Remodel", **kwargs):
        return await project_service.create_project(scope, ProjectCreate(name=name, **kwargs))

    return _make


@pytest.fixture
def make_task():
    async def _make(scope: TenantScope, project, title: str, **kwargs):
        return await task_service.create_task(
            scope, TaskCreate(project_id=project.id, title=title, **kwargs)
        )

    return _make
