"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) built from the production
models, so tests run without Docker / PostgreSQL.  Each test gets a fresh
database; ``get_db`` is overridden so the API uses it too.
"""

import itertools
import os

# Must be set before ridehail.config is imported
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridehail.api.middleware import limiter
from ridehail.api.security import create_access_token
from ridehail.domain.enums import DriverStatus, UserRole, VehicleStatus, VehicleType
from ridehail.infrastructure.database import Base
from ridehail.infrastructure.models import DriverProfileModel, UserModel, VehicleModel
from ridehail.infrastructure.passwords import hash_password


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """AsyncClient backed by the per-test SQLite database."""

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    from ridehail.api.app import create_app
    from ridehail.api.dependencies import get_db

    limiter.enabled = False
    app = create_app()
    app.dependency_overrides[get_db] = _test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Factories ─────────────────────────────────────────────────────────

_seq = itertools.count(1)


@pytest.fixture
def make_user(session_factory):
    async def _make(
        role: UserRole = UserRole.USER,
        *,
        full_name: str | None = None,
        email: str | None = None,
        password: str = "password123",
        is_active: bool = True,
    ) -> UserModel:
        n = next(_seq)
        user = UserModel(
            full_name=full_name or f"{role.value.title()} {n}",
            email=email or f"{role.value}{n}@example.com",
            phone=f"+23480{n:08d}",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make


@pytest.fixture
def make_vehicle(session_factory):
    async def _make(
        vehicle_type: VehicleType = VehicleType.SEDAN,
        status: VehicleStatus = VehicleStatus.AVAILABLE,
    ) -> VehicleModel:
        n = next(_seq)
        vehicle = VehicleModel(
            make="Toyota",
            model="Corolla",
            year=2020,
            license_plate=f"LAG-{n:04d}",
            color="Silver",
            vehicle_type=vehicle_type,
            status=status,
        )
        async with session_factory() as session:
            session.add(vehicle)
            await session.commit()
        return vehicle

    return _make


@pytest.fixture
def make_driver(session_factory, make_user, make_vehicle):
    """Driver user + profile, optionally holding a vehicle of *vehicle_type*."""

    async def _make(
        vehicle_type: VehicleType | None = None,
        *,
        is_verified: bool = True,
        status: DriverStatus = DriverStatus.ACTIVE,
        is_active: bool = True,
    ) -> tuple[UserModel, DriverProfileModel]:
        user = await make_user(UserRole.DRIVER, is_active=is_active)
        vehicle = None
        if vehicle_type is not None:
            vehicle = await make_vehicle(vehicle_type, status=VehicleStatus.ASSIGNED)
        profile = DriverProfileModel(
            user_id=user.id,
            license_number=f"DL-{user.id[:8]}",
            address_street="12 Marina Road",
            address_city="Lagos",
            vehicle_id=vehicle.id if vehicle else None,
            status=status,
            is_verified=is_verified,
        )
        async with session_factory() as session:
            session.add(profile)
            await session.commit()
        return user, profile

    return _make


@pytest.fixture
def auth():
    """Bearer headers for a user."""

    def _headers(user: UserModel) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers
