from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.nutrition_calc import InvalidProfileInput
from core.profile_draft import missing_fields, to_profile
from services.auth import current_claims, current_user_id
from services.db import ProfileStore, get_session
from api.v1.schemas import AuthUserOut, ProfileEnvelope, ProfileIn, ProfileSaved

router = APIRouter()
_LOG = logging.getLogger(__name__)

_REQUIRED_MSG = (
    "Missing required fields: age, weight, height, gender, activity_level, fitness_goal"
)


# ───────────────────────── who am I ─────────────────────────
@router.get("/auth/user", response_model=AuthUserOut)
async def auth_user(claims: dict = Depends(current_claims)) -> AuthUserOut:
    return AuthUserOut(
        user={"id": claims["sub"], "email": claims.get("email"), "role": claims.get("role")}
    )


# ───────────────────────── fetch ────────────────────────────
@router.get("/user-profile", response_model=ProfileEnvelope)
async def fetch_profile(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileEnvelope:
    try:
        profile = await ProfileStore(db).get_profile(user_id)
    except (SQLAlchemyError, OSError) as exc:
        _LOG.error("profile fetch failed for %s: %s", user_id, exc)
        raise HTTPException(status_code=500, detail="Failed to fetch profile")
    return ProfileEnvelope(profile=profile)


# ───────────────────────── create / update ──────────────────
@router.post("/user-profile", response_model=ProfileSaved)
@router.put("/user-profile", response_model=ProfileSaved)
async def save_profile(
    body: ProfileIn,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileSaved:
    # the form must state an activity level; the default is a chat-only policy
    if missing_fields(body) or body.activity_level is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_REQUIRED_MSG)

    try:
        profile = to_profile(body, user_id)
    except InvalidProfileInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        saved = await ProfileStore(db).upsert_profile(profile)
    except (SQLAlchemyError, OSError) as exc:
        _LOG.error("profile save failed for %s: %s", user_id, exc)
        raise HTTPException(status_code=500, detail="Failed to save profile")
    return ProfileSaved(profile=saved)
