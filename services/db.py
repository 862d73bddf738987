"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for profiles, saved plans and generation failures
* ProfileStore: the get / upsert seam used by routers and scripts
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, func, select
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings
from core.models.profile import UserProfile

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


def _async_url(raw: str) -> str:
    # hosted providers hand out plain postgres:// URLs
    if raw.startswith("postgres://"):
        return raw.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw.startswith("postgresql://"):
        return raw.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw


def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_async_engine(_async_url(settings.database_url), pool_pre_ping=True)
    return _ENGINE


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfileRow(Base):
    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, unique=True, index=True)

    age: Mapped[int] = mapped_column(Integer)
    weight: Mapped[float] = mapped_column(Float)
    height: Mapped[float] = mapped_column(Float)
    gender: Mapped[str] = mapped_column(String)
    activity_level: Mapped[str] = mapped_column(String)
    fitness_goal: Mapped[str] = mapped_column(String)
    dietary_restrictions: Mapped[list] = mapped_column(JSON, default=list)
    medical_conditions: Mapped[list] = mapped_column(JSON, default=list)
    experience_level: Mapped[str] = mapped_column(String, default="beginner")

    bmr: Mapped[int] = mapped_column(Integer)
    tdee: Mapped[int] = mapped_column(Integer)
    target_calories: Mapped[int] = mapped_column(Integer)
    target_protein: Mapped[int] = mapped_column(Integer)
    target_carbs: Mapped[int] = mapped_column(Integer)
    target_fat: Mapped[int] = mapped_column(Integer)

    preferred_workout_days: Mapped[int] = mapped_column(Integer, default=3)
    gym_access: Mapped[bool] = mapped_column(Boolean, default=True)
    equipment_available: Mapped[list] = mapped_column(JSON, default=list)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class MealPlanRow(Base):
    __tablename__ = "meal_plans"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    goal: Mapped[str] = mapped_column(String)
    ingredients: Mapped[list] = mapped_column(JSON, default=list)
    meals: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class WorkoutPlanRow(Base):
    __tablename__ = "workout_plans"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    goal: Mapped[str] = mapped_column(String)
    split: Mapped[list] = mapped_column(JSON, default=list)
    days: Mapped[int] = mapped_column(Integer)
    exercises: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class GenerationFailure(Base):
    __tablename__ = "generation_failures"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String)
    plan_type: Mapped[str] = mapped_column(String)
    stage: Mapped[str] = mapped_column(String)
    error_message: Mapped[str] = mapped_column(Text)
    raw_input: Mapped[str | None] = mapped_column(Text)
    raw_output: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


# ───────── profile DAO ───────────────────────────────────────────────
_PROFILE_COLUMNS = (
    "age", "weight", "height", "gender", "activity_level", "fitness_goal",
    "dietary_restrictions", "medical_conditions", "experience_level",
    "bmr", "tdee", "target_calories", "target_protein", "target_carbs", "target_fat",
    "preferred_workout_days", "gym_access", "equipment_available",
)


class ProfileStore:
    """One profile per user; writes are single-row, last write wins."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _row(self, user_id: str) -> UserProfileRow | None:
        res = await self._db.execute(
            select(UserProfileRow).where(UserProfileRow.user_id == user_id)
        )
        return res.scalar_one_or_none()

    async def get_profile(self, user_id: str) -> UserProfile | None:
        row = await self._row(user_id)
        if row is None:
            return None
        return UserProfile.model_validate(row, from_attributes=True)

    async def upsert_profile(self, profile: UserProfile) -> UserProfile:
        """Update-or-insert; propagates SQLAlchemyError after rolling back."""
        payload = profile.model_dump(mode="json", include=set(_PROFILE_COLUMNS))
        try:
            row = await self._row(profile.user_id)
            if row is None:
                row = UserProfileRow(user_id=profile.user_id, **payload)
                self._db.add(row)
            else:
                for key, value in payload.items():
                    setattr(row, key, value)
            row.updated_at = _utcnow()
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise
        await self._db.refresh(row)
        return UserProfile.model_validate(row, from_attributes=True)


async def log_failure_to_db(
    db: AsyncSession,
    plan_type: str,
    stage: str,
    error: str,
    user_id: str | None = None,
    raw_input: str = "",
    raw_output: str = "",
) -> None:
    """
    Persist a plan-generation failure for later inspection.
    """
    db.add(
        GenerationFailure(
            user_id=user_id,
            plan_type=plan_type,
            stage=stage,
            error_message=error,
            raw_input=raw_input,
            raw_output=raw_output,
        )
    )
    await db.commit()


# ───────── session helper ────────────────────────────────────────────

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(engine(), expire_on_commit=False)
    async with async_session() as session:
        yield session
