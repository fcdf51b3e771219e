"""Shared test fixtures — async DB, client, clock, user factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from expense_api.common.constants import UserRole
from expense_api.database import Base, get_db
from expense_api.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import expense_api.users.models  # noqa: F401
import expense_api.expenses.models  # noqa: F401

# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from expense_api.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Clock ───────────────────────────────────────────────────────────

class FakeClock:
    """Deterministic clock: every reading advances by ``step``."""

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    user_id: int,
    role: UserRole,
    name: str | None = None,
    email: str | None = None,
) -> dict:
    return dict(
        id=user_id,
        name=name or f"{role.value.title()} {user_id}",
        email=email or f"{role.value.lower()}{user_id}@demo.com",
        password_hash="not-real",
        role=role,
        created_at=datetime.now(timezone.utc),
    )


async def _insert_user(db: AsyncSession, **kwargs) -> dict:
    from expense_api.users.models import User

    data = _make_user(**kwargs)
    db.add(User(**data))
    await db.commit()
    return data


@pytest.fixture
async def employee(db) -> dict:
    """Insert the EMPLOYEE user (id 1) and return its data dict."""
    return await _insert_user(db, user_id=1, role=UserRole.EMPLOYEE)


@pytest.fixture
async def manager(db) -> dict:
    """Insert the MANAGER user (id 2)."""
    return await _insert_user(db, user_id=2, role=UserRole.MANAGER)


@pytest.fixture
async def finance(db) -> dict:
    """Insert the FINANCE user (id 3)."""
    return await _insert_user(db, user_id=3, role=UserRole.FINANCE)


# ── Auth helpers ────────────────────────────────────────────────────

def actor_headers(user: dict) -> dict[str, str]:
    """Trusted identity header the upstream gateway would forward."""
    return {"X-User-Id": str(user["id"])}
