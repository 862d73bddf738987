from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    lightly_active = "lightly_active"
    moderately_active = "moderately_active"
    very_active = "very_active"
    extremely_active = "extremely_active"


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


DERIVED_FIELDS = (
    "bmr",
    "tdee",
    "target_calories",
    "target_protein",
    "target_carbs",
    "target_fat",
)


def _unique(items: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        item = item.strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)


class ExtractedUpdate(BaseModel):
    """Fields recognised in a single chat message."""

    age: int | None = None
    weight: float | None = None
    height: float | None = None
    gender: Gender | None = None
    fitness_goal: str | None = None

    def fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.fields()


class ProfileDraft(BaseModel):
    """A possibly incomplete profile carried across chat turns."""

    age: int | None = None
    weight: float | None = None
    height: float | None = None
    gender: Gender | None = None
    activity_level: ActivityLevel | None = None
    fitness_goal: str | None = None
    dietary_restrictions: list[str] = []
    medical_conditions: list[str] = []
    experience_level: ExperienceLevel = ExperienceLevel.beginner
    preferred_workout_days: int = Field(3, ge=1, le=7)
    gym_access: bool = True
    equipment_available: list[str] = []

    bmr: int | None = None
    tdee: int | None = None
    target_calories: int | None = None
    target_protein: int | None = None
    target_carbs: int | None = None
    target_fat: int | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("gender", "activity_level", "experience_level", mode="before")
    @classmethod
    def _normalise_choice(cls, v: Any) -> Any:
        # "Moderately Active" -> "moderately_active"
        if isinstance(v, str):
            v = v.strip().lower().replace(" ", "_").replace("-", "_")
            return v or None
        return v

    @field_validator("dietary_restrictions", "medical_conditions", "equipment_available")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        return _unique(v)

    def has_targets(self) -> bool:
        return all(getattr(self, f) is not None for f in DERIVED_FIELDS)


class UserProfile(ProfileDraft):
    """A complete, persisted profile: every required and derived field set."""

    user_id: str
    age: int
    weight: float
    height: float
    gender: Gender
    activity_level: ActivityLevel
    fitness_goal: str

    bmr: int
    tdee: int
    target_calories: int
    target_protein: int
    target_carbs: int
    target_fat: int

    updated_at: datetime | None = None
