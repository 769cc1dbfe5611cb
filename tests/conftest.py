"""Shared fixtures: a throwaway SQLite database, seeded users and tokens."""

from __future__ import annotations

import os

# Settings are read at import time by the application modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from daycare_api.config import get_settings
from daycare_api.database import Base
from daycare_api.models import User, UserRole
from daycare_api.services.identity import Caller

settings = get_settings()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite so separate sessions get separate connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'messages.db'}",
        poolclass=NullPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# User Fixtures
# =============================================================================


async def create_user(
    db: AsyncSession,
    first_name: str,
    last_name: str,
    *roles: str,
    created_at: datetime | None = None,
) -> User:
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}@daycare.test",
        created_at=created_at or datetime.utcnow(),
    )
    for role in roles:
        user.roles.append(UserRole(role=role))
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture(scope="function")
async def users(test_db: AsyncSession) -> SimpleNamespace:
    """One admin, one teacher and two parents."""
    base = datetime(2026, 1, 1)
    return SimpleNamespace(
        admin=await create_user(test_db, "Alice", "Admin", settings.admin_role, created_at=base),
        teacher=await create_user(test_db, "Tina", "Teacher", settings.teacher_role, created_at=base + timedelta(minutes=1)),
        parent=await create_user(test_db, "Paul", "Parent", settings.parent_role, created_at=base + timedelta(minutes=2)),
        parent2=await create_user(test_db, "Petra", "Parent", settings.parent_role, created_at=base + timedelta(minutes=3)),
    )


def caller_for(user: User) -> Caller:
    return Caller(id=user.id, roles=frozenset(user.role_names))


# =============================================================================
# Token Helpers
# =============================================================================


def create_test_token(user_id, roles=(), expired: bool = False) -> str:
    """Create a token the way the identity provider would."""
    now = datetime.utcnow()
    expire = now - timedelta(hours=1) if expired else now + timedelta(hours=1)
    payload = {
        "sub": str(user_id),
        "roles": list(roles),
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user.id, [r.role for r in user.roles])}"}
