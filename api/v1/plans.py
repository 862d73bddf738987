# api/v1/plans.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth import current_user_id
from services.db import MealPlanRow, WorkoutPlanRow, get_session
from api.v1.schemas import MealPlanIn, MealPlanOut, WorkoutPlanOut, WorkoutPlanSave

router = APIRouter()


async def _owned(db: AsyncSession, model, plan_id: int, user_id: str):
    row = await db.get(model, plan_id)
    # someone else's plan looks exactly like a missing one
    if row is None or row.user_id != user_id:
        raise HTTPException(status_code=404, detail="Plan not found")
    return row


# ───────────────────────── meal plans ───────────────────────
@router.get(
    "/meal-plans",
    response_model=list[MealPlanOut],
    summary="List saved meal plans, newest first",
)
async def list_meal_plans(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[MealPlanOut]:
    result = await db.execute(
        select(MealPlanRow)
        .where(MealPlanRow.user_id == user_id)
        .order_by(MealPlanRow.created_at.desc())
    )
    return [MealPlanOut.model_validate(p, from_attributes=True) for p in result.scalars().all()]


@router.post(
    "/meal-plans",
    response_model=MealPlanOut,
    status_code=status.HTTP_201_CREATED,
)
async def save_meal_plan(
    body: MealPlanIn,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MealPlanOut:
    plan = MealPlanRow(user_id=user_id, **body.model_dump())
    db.add(plan)
    await db.commit()
    await db.refresh(plan)
    return MealPlanOut.model_validate(plan, from_attributes=True)


@router.delete("/meal-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal_plan(
    plan_id: int,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    plan = await _owned(db, MealPlanRow, plan_id, user_id)
    await db.delete(plan)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ───────────────────────── workout plans ────────────────────
@router.get(
    "/workout-plans",
    response_model=list[WorkoutPlanOut],
    summary="List saved workout plans, newest first",
)
async def list_workout_plans(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[WorkoutPlanOut]:
    result = await db.execute(
        select(WorkoutPlanRow)
        .where(WorkoutPlanRow.user_id == user_id)
        .order_by(WorkoutPlanRow.created_at.desc())
    )
    return [WorkoutPlanOut.model_validate(p, from_attributes=True) for p in result.scalars().all()]


@router.post(
    "/workout-plans",
    response_model=WorkoutPlanOut,
    status_code=status.HTTP_201_CREATED,
)
async def save_workout_plan(
    body: WorkoutPlanSave,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> WorkoutPlanOut:
    payload = body.workout_plan.model_dump()
    plan = None
    if body.action == "update":
        plan = (
            await db.execute(
                select(WorkoutPlanRow)
                .where(WorkoutPlanRow.user_id == user_id)
                .order_by(WorkoutPlanRow.created_at.desc())
                .limit(1)
            )
        ).scalar_one_or_none()

    if plan is None:                           # add, or nothing to update yet
        plan = WorkoutPlanRow(user_id=user_id, **payload)
        db.add(plan)
    else:
        for key, value in payload.items():
            setattr(plan, key, value)

    await db.commit()
    await db.refresh(plan)
    return WorkoutPlanOut.model_validate(plan, from_attributes=True)


@router.delete("/workout-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout_plan(
    plan_id: int,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    plan = await _owned(db, WorkoutPlanRow, plan_id, user_id)
    await db.delete(plan)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
