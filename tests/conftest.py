"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.models.profile import UserProfile
from main import app
from services.auth import create_token
from services.db import Base, get_session

NOW = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)
USER_ID = "3f6c1a52-0000-4000-8000-000000000001"


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession: primary-key get/add/delete only."""

    def __init__(self) -> None:
        self.rows: dict[tuple[type, int], Any] = {}
        self.added: list[Any] = []
        self.commits = 0
        self._next_id = 1

    def add(self, obj: Any) -> None:
        if getattr(obj, "id", None) is None:
            obj.id = self._next_id
            self._next_id += 1
        self.rows[(type(obj), obj.id)] = obj
        self.added.append(obj)

    async def get(self, model: type, key: int) -> Any:
        return self.rows.get((model, key))

    async def delete(self, obj: Any) -> None:
        self.rows.pop((type(obj), obj.id), None)

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass

    async def refresh(self, obj: Any) -> None:
        for attr in ("created_at", "updated_at"):
            if hasattr(obj, attr) and getattr(obj, attr) is None:
                setattr(obj, attr, NOW)


class FakeProfileStore:
    """In-memory ProfileStore; `fail_writes` simulates the DB being down."""

    profiles: dict[str, UserProfile] = {}
    fail_writes = False
    writes = 0

    def __init__(self, db: Any) -> None:
        self._db = db

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return self.profiles.get(user_id)

    async def upsert_profile(self, profile: UserProfile) -> UserProfile:
        type(self).writes += 1
        if self.fail_writes:
            raise OperationalError("UPDATE user_profiles", {}, Exception("connection refused"))
        saved = profile.model_copy(update={"updated_at": NOW})
        self.profiles[profile.user_id] = saved
        return saved


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_session():
    return FakeSession()


@pytest.fixture()
def override_session(fake_session):
    """Override the FastAPI dependency so no real DB is needed."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    yield fake_session
    app.dependency_overrides.clear()


@pytest.fixture()
def store(monkeypatch):
    """Fresh in-memory profile store wired into every router."""
    class _Store(FakeProfileStore):
        profiles = {}
        fail_writes = False
        writes = 0

    for mod in ("api.v1.users", "api.v1.chat", "api.v1.generators"):
        monkeypatch.setattr(f"{mod}.ProfileStore", _Store)
    return _Store


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(USER_ID, email='sam@example.com')}"}


@pytest.fixture()
async def client(override_session, store):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_profile(**overrides: Any) -> UserProfile:
    """A stored, complete profile for USER_ID (25 y/o male, build muscle)."""
    data: dict[str, Any] = {
        "user_id": USER_ID,
        "age": 25,
        "weight": 70.0,
        "height": 175.0,
        "gender": "male",
        "activity_level": "moderately_active",
        "fitness_goal": "build muscle",
        "dietary_restrictions": ["lactose-free"],
        "preferred_workout_days": 4,
        "bmr": 1674,
        "tdee": 2594,
        "target_calories": 2894,
        "target_protein": 217,
        "target_carbs": 326,
        "target_fat": 80,
        "updated_at": NOW,
    }
    data.update(overrides)
    return UserProfile.model_validate(data)


# ---------------------------------------------------------------------------
# Real SQLAlchemy session on in-memory SQLite (ordering, upserts)
# ---------------------------------------------------------------------------

@pytest.fixture()
async def sqlite_session():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(eng, expire_on_commit=False)
    async with factory() as session:
        yield session
    await eng.dispose()


@pytest.fixture()
async def db_client(sqlite_session):
    """App client backed by the SQLite session; ProfileStore is the real one."""
    async def _override():
        yield sqlite_session

    app.dependency_overrides[get_session] = _override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
