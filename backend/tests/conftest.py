"""Pytest fixtures for PVZ backend tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pvz.config import Settings
from pvz.container import Container, build_container
from pvz.database import Base
from pvz.main import create_app
from pvz.models import City, PickupPoint, UserRole


@pytest_asyncio.fixture
async def settings(tmp_path) -> Settings:
    # One SQLite file per test keeps tests isolated.
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key="test-secret",
    )


@pytest_asyncio.fixture
async def container(settings: Settings) -> Container:
    container = build_container(settings)
    async with container.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield container
    await container.dispose()


@pytest_asyncio.fixture
async def client(settings: Settings, container: Container):
    app = create_app(settings, container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def sample_pvz(container: Container) -> PickupPoint:
    return await container.pickup_points.create_pickup_point(City.MOSCOW, pvz_id=uuid.uuid4())


@pytest_asyncio.fixture
async def employee_headers(container: Container) -> dict[str, str]:
    token = await container.users.dummy_login(UserRole.EMPLOYEE)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def moderator_headers(container: Container) -> dict[str, str]:
    token = await container.users.dummy_login(UserRole.MODERATOR)
    return {"Authorization": f"Bearer {token}"}
