# api/v1/chat.py
from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.profile import ProfileDraft
from core.profile_draft import IngestResult, ingest_message, to_profile
from services import chat_agent
from services.auth import current_user_id
from services.db import ProfileStore, get_session
from api.v1.schemas import ChatRequest, ChatResponse

router = APIRouter()
_LOG = logging.getLogger(__name__)

SAVE_FAILED_NOTICE = "Your info wasn't saved, please try again."
AGENT_DOWN_REPLY = (
    "I'm sorry, I'm having trouble connecting to the server right now. "
    "Please try again in a moment."
)
_EMPTY_REPLY = "I'm sorry, I couldn't process your request right now. Please try again."


def profile_context(draft: ProfileDraft, message: str) -> str:
    """Prefix `message` with the user's profile once we know enough about them."""
    if not draft.age:
        return message
    gender = draft.gender.value if draft.gender else None
    activity = draft.activity_level.value if draft.activity_level else None
    return (
        f"User Profile: Age: {draft.age}, Weight: {draft.weight}kg, "
        f"Height: {draft.height}cm, Gender: {gender}, Goal: {draft.fitness_goal}, "
        f"Activity Level: {activity}, Daily Targets: {draft.target_calories} calories, "
        f"{draft.target_protein}g protein, {draft.target_carbs}g carbs, "
        f"{draft.target_fat}g fat. User Message: {message}"
    )


async def _persist(
    result: IngestResult, user_id: str, store: ProfileStore
) -> tuple[ProfileDraft, bool | None, str | None]:
    """Single write attempt; on failure the computed draft is kept."""
    if not result.should_persist:
        return result.draft, None, None
    try:
        saved = await store.upsert_profile(to_profile(result.draft, user_id))
    except (SQLAlchemyError, OSError) as exc:
        _LOG.error("profile upsert failed for %s: %s", user_id, exc)
        return result.draft, False, SAVE_FAILED_NOTICE
    draft = ProfileDraft.model_validate(saved.model_dump(exclude={"user_id", "updated_at"}))
    return draft, True, None


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ChatResponse:
    store = ProfileStore(db)

    draft = body.draft
    if draft is None:
        try:
            stored = await store.get_profile(user_id)
        except (SQLAlchemyError, OSError) as exc:
            _LOG.warning("could not load profile for %s: %s", user_id, exc)
            stored = None
        draft = (
            ProfileDraft.model_validate(stored.model_dump(exclude={"user_id", "updated_at"}))
            if stored
            else ProfileDraft()
        )

    # 1) extraction + merge (never raises)
    result = ingest_message(draft, body.message)

    # 2) persist when the draft just became / stayed complete
    draft, saved, notice = await _persist(result, user_id, store)

    # 3) ask the agent
    out = ChatResponse(
        response=AGENT_DOWN_REPLY,
        draft=draft,
        state=result.state,
        extracted=result.update,
        saved=saved,
        notice=notice,
    )
    try:
        data = await chat_agent.send_chat(profile_context(draft, body.message), user_id)
    except (httpx.HTTPError, ValueError) as exc:
        _LOG.warning("chat agent unavailable: %s", exc)
        return out

    out.response = data.get("response") or _EMPTY_REPLY
    out.workout_plan = data.get("workout_plan")
    out.nutrition_plan = data.get("nutrition_plan")
    out.show_both_buttons = bool(data.get("show_both_buttons", False))
    return out
