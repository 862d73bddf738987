# api/v1/generators.py
from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.profile import UserProfile
from scripts.helpers import extract_clean_json
from services import chat_agent, gemini
from services.auth import optional_user_id
from services.db import ProfileStore, get_session, log_failure_to_db
from api.v1.schemas import (
    MealPlanGenerated,
    MealPlanRequest,
    WorkoutPlanGenerated,
    WorkoutPlanRequest,
)

router = APIRouter()
_LOG = logging.getLogger(__name__)

_DEFAULT_WORKOUT_DAYS = 3


# ───────────────────────── prompts ──────────────────────────
def meal_plan_prompt(req: MealPlanRequest) -> str:
    lines = [
        "You are a professional nutritionist and chef. Create a detailed daily "
        "meal plan based on the following:",
        "",
        f"Goal: {req.goal}",
        f"Available Ingredients: {', '.join(req.ingredients)}",
    ]
    if req.dietary_restrictions:
        lines.append(f"Dietary Restrictions: {', '.join(req.dietary_restrictions)}")
    if req.target_calories:
        lines.append(f"Target Daily Calories: {req.target_calories}")
    lines += [
        "",
        "Return ONLY a JSON object with this structure:",
        json.dumps(
            {
                "goal": req.goal,
                "ingredients": req.ingredients,
                "meals": [
                    {
                        "name": "Meal name",
                        "type": "breakfast|lunch|dinner|snack",
                        "calories": "number",
                        "protein": "number (g)",
                        "carbs": "number (g)",
                        "fat": "number (g)",
                        "fiber": "number (g)",
                        "ingredients_used": ["ingredient"],
                        "steps": ["Step 1"],
                        "prep_time": "number (min)",
                        "cook_time": "number (min)",
                        "tips": "optional",
                    }
                ],
            },
            indent=2,
        ),
        "",
        "Requirements:",
        "- 3-4 meals (breakfast, lunch, dinner, optionally a snack)",
        "- use primarily the provided ingredients and respect dietary restrictions",
        "- realistic macros; daily total should match the calorie target if given",
        "- detailed cooking steps, prep and cook times",
    ]
    return "\n".join(lines)


def workout_plan_prompt(req: WorkoutPlanRequest, days: int) -> str:
    return "\n".join(
        [
            "You are a professional fitness trainer and exercise physiologist. "
            "Create a detailed workout plan based on the following:",
            "",
            f"Goal: {req.goal}",
            f"Body Data: {json.dumps(req.body_data)}",
            f"Days Available: {days}",
            f"Preferences: {req.preferences or 'None specified'}",
            "",
            "Return ONLY a JSON object with this structure:",
            json.dumps(
                {
                    "goal": req.goal,
                    "split": ["Day 1 name"],
                    "days": days,
                    "exercises": [
                        {
                            "day": "Day name (e.g. Push Day)",
                            "exercises": [
                                {
                                    "name": "Exercise name",
                                    "sets": "number",
                                    "reps": "rep range, e.g. 8-12",
                                    "rest": "rest time, e.g. 60-90s",
                                    "notes": "optional form tips",
                                }
                            ],
                        }
                    ],
                },
                indent=2,
            ),
            "",
            "Requirements:",
            f"- a split appropriate for {days} days per week",
            "- compound and isolation exercises with rep ranges and rest times for the goal",
            "- progressive, sustainable, and suited to the experience level in the body data",
        ]
    )


# ───────────────────────── helpers ──────────────────────────
async def _profile_for(user_id: str | None, db: AsyncSession) -> UserProfile | None:
    if user_id is None:
        return None
    try:
        return await ProfileStore(db).get_profile(user_id)
    except (SQLAlchemyError, OSError) as exc:
        _LOG.warning("profile pre-fill skipped for %s: %s", user_id, exc)
        return None


def _body_data(profile: UserProfile) -> dict[str, Any]:
    return profile.model_dump(
        mode="json",
        include={
            "age", "weight", "height", "gender", "activity_level", "fitness_goal",
            "experience_level", "gym_access", "equipment_available", "medical_conditions",
        },
    )


async def _generate_json(
    prompt: str,
    plan_type: str,
    user_id: str | None,
    db: AsyncSession,
) -> dict[str, Any]:
    raw = ""
    stage = "generate"
    try:
        raw = await run_in_threadpool(gemini.generate, prompt)
        stage = "parse"
        return extract_clean_json(raw)
    except (gemini.GenerationError, ValueError) as exc:
        _LOG.error("%s plan %s failed: %s", plan_type, stage, exc)
        try:
            await log_failure_to_db(
                db, plan_type, stage, str(exc),
                user_id=user_id, raw_input=prompt, raw_output=raw,
            )
        except (SQLAlchemyError, OSError) as log_exc:
            _LOG.warning("could not record generation failure: %s", log_exc)
        raise HTTPException(status_code=500, detail=f"Failed to generate {plan_type} plan")


# ───────────────────────── meal plan ────────────────────────
@router.post("/generate-meal-plan", response_model=MealPlanGenerated)
async def generate_meal_plan(
    body: MealPlanRequest,
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_session),
) -> MealPlanGenerated:
    profile = await _profile_for(user_id, db)
    if profile:
        if body.target_calories is None:
            body.target_calories = profile.target_calories
        if not body.dietary_restrictions:
            body.dietary_restrictions = list(profile.dietary_restrictions)

    # 1) agent-side planner, if reachable
    try:
        data = await chat_agent.request_meal_plan(body.model_dump())
    except (httpx.HTTPError, ValueError) as exc:
        _LOG.info("RAG agent unavailable, falling back to Gemini: %s", exc)
    else:
        return MealPlanGenerated(mealPlan=data.get("mealPlan", data))

    # 2) direct Gemini
    plan = await _generate_json(meal_plan_prompt(body), "meal", user_id, db)
    return MealPlanGenerated(mealPlan=plan)


# ───────────────────────── workout plan ─────────────────────
@router.post("/generate-workout-plan", response_model=WorkoutPlanGenerated)
async def generate_workout_plan(
    body: WorkoutPlanRequest,
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_session),
) -> WorkoutPlanGenerated:
    profile = await _profile_for(user_id, db)
    if profile and not body.body_data:
        body.body_data = _body_data(profile)
    if not body.body_data:
        raise HTTPException(
            status_code=400, detail="Goal, body data, and days available are required"
        )

    days = body.days_available or (
        profile.preferred_workout_days if profile else _DEFAULT_WORKOUT_DAYS
    )
    plan = await _generate_json(workout_plan_prompt(body, days), "workout", user_id, db)
    return WorkoutPlanGenerated(workoutPlan=plan)
