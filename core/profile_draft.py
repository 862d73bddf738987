"""
core/profile_draft.py
────────────────────────────────────────────────────────────────────────
Accumulates chat-extracted details into a draft profile.

The draft moves EMPTY → PARTIAL → COMPLETE. Only a COMPLETE draft gets
nutrition targets; anything short of that has its derived fields cleared
so stale numbers never travel with it. The draft itself is owned by the
caller (one per chat session) and passed in explicitly on every turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from core.extractor import extract_update
from core.models.profile import (
    DERIVED_FIELDS,
    ActivityLevel,
    ExtractedUpdate,
    ProfileDraft,
    UserProfile,
)
from core.nutrition_calc import BodyStats, InvalidProfileInput, NutritionalCalculator

_LOG = logging.getLogger(__name__)

REQUIRED_FIELDS = ("age", "weight", "height", "gender", "fitness_goal")

# Filled in only when the user never gave one; any real value wins.
DEFAULT_ACTIVITY_LEVEL = ActivityLevel.moderately_active

_calc = NutritionalCalculator()


class DraftState(str, Enum):
    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(frozen=True)
class IngestResult:
    draft: ProfileDraft
    update: ExtractedUpdate
    state: DraftState

    @property
    def should_persist(self) -> bool:
        """Write only when this message added something and the draft is complete."""
        return self.state is DraftState.COMPLETE and not self.update.is_empty()


def missing_fields(draft: ProfileDraft) -> list[str]:
    return [f for f in REQUIRED_FIELDS if getattr(draft, f) in (None, "")]


def body_stats(draft: ProfileDraft) -> BodyStats:
    """Calculator input for `draft`; raises InvalidProfileInput when incomplete."""
    missing = missing_fields(draft)
    if missing:
        raise InvalidProfileInput(f"missing fields: {', '.join(missing)}")
    stats = BodyStats(
        age=draft.age,
        gender=draft.gender.value,
        weight_kg=draft.weight,
        height_cm=draft.height,
        activity_level=(draft.activity_level or DEFAULT_ACTIVITY_LEVEL).value,
        goal=draft.fitness_goal,
    )
    stats.validate()
    return stats


def draft_state(draft: ProfileDraft) -> DraftState:
    if all(getattr(draft, f) in (None, "") for f in REQUIRED_FIELDS):
        return DraftState.EMPTY
    try:
        _calc.targets(body_stats(draft))
    except InvalidProfileInput:
        return DraftState.PARTIAL
    return DraftState.COMPLETE


def strip_targets(draft: ProfileDraft) -> ProfileDraft:
    return draft.model_copy(update={f: None for f in DERIVED_FIELDS})


def merge(draft: ProfileDraft, update: ExtractedUpdate) -> ProfileDraft:
    """Per-field last-write-wins; targets are dropped because inputs changed."""
    fields = update.fields()
    if not fields:
        return draft
    return strip_targets(draft.model_copy(update=fields))


def with_targets(
    draft: ProfileDraft, calc: NutritionalCalculator | None = None
) -> ProfileDraft:
    """Return `draft` with activity level filled and all targets recomputed."""
    stats = body_stats(draft)
    targets = (calc or _calc).targets(stats)
    return draft.model_copy(
        update={"activity_level": ActivityLevel(stats.activity_level), **targets}
    )


def to_profile(draft: ProfileDraft, user_id: str) -> UserProfile:
    """Promote a COMPLETE draft to a full profile, recomputing its targets."""
    complete = with_targets(draft)
    return UserProfile.model_validate({**complete.model_dump(), "user_id": user_id})


def ingest_message(
    draft: ProfileDraft | None,
    message: str,
    calc: NutritionalCalculator | None = None,
) -> IngestResult:
    """One chat turn: extract, merge, classify and (if complete) compute."""
    draft = draft or ProfileDraft()
    update = extract_update(message)
    merged = merge(draft, update)
    state = draft_state(merged)

    if state is DraftState.COMPLETE:
        merged = with_targets(merged, calc)
    else:
        merged = strip_targets(merged)

    _LOG.debug("draft %s after update %s", state.value, sorted(update.fields()))
    return IngestResult(draft=merged, update=update, state=state)
