from __future__ import annotations
from typing import Any

from pydantic import BaseModel, Field

from core.models.profile import ExtractedUpdate, ProfileDraft
from core.profile_draft import DraftState


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    # session-held draft; omitted → start from the stored profile
    draft: ProfileDraft | None = None


class ChatResponse(BaseModel):
    response: str
    draft: ProfileDraft
    state: DraftState
    extracted: ExtractedUpdate
    saved: bool | None = None      # None: no write attempted
    notice: str | None = None

    # passed through from the agent
    workout_plan: dict[str, Any] | None = None
    nutrition_plan: dict[str, Any] | None = None
    show_both_buttons: bool = False
