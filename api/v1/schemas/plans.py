from __future__ import annotations
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ───────── generators ─────────
class MealPlanRequest(BaseModel):
    goal: str = Field(..., min_length=1)
    ingredients: list[str] = Field(..., min_length=1)
    dietary_restrictions: list[str] = []
    target_calories: int | None = Field(None, gt=0)


class WorkoutPlanRequest(BaseModel):
    goal: str = Field(..., min_length=1)
    body_data: dict[str, Any] = Field(default_factory=dict, alias="bodyData")
    days_available: int | None = Field(None, ge=1, le=7, alias="daysAvailable")
    preferences: str | None = None

    # web client sends camelCase; snake_case is accepted too
    model_config = ConfigDict(populate_by_name=True)


class MealPlanGenerated(BaseModel):
    mealPlan: dict[str, Any]


class WorkoutPlanGenerated(BaseModel):
    workoutPlan: dict[str, Any]


# ───────── saved plans ─────────
class MealPlanIn(BaseModel):
    goal: str = "General meal plan"
    ingredients: list[str] = []
    meals: list[dict[str, Any]] = []


class MealPlanOut(MealPlanIn):
    id: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutPlanIn(BaseModel):
    goal: str = "General workout plan"
    split: list[str] = []
    days: int = Field(7, ge=1, le=7)
    exercises: list[dict[str, Any]] = []


class WorkoutPlanSave(BaseModel):
    # "update" replaces the most recent saved plan, "add" keeps history
    action: Literal["add", "update"] = "add"
    workout_plan: WorkoutPlanIn


class WorkoutPlanOut(WorkoutPlanIn):
    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
