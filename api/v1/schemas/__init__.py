"""Re-export individual schema modules for easy imports."""

from .profile import AuthUserOut, ProfileEnvelope, ProfileIn, ProfileSaved
from .chat import ChatRequest, ChatResponse
from .plans import (
    MealPlanGenerated,
    MealPlanIn,
    MealPlanOut,
    MealPlanRequest,
    WorkoutPlanGenerated,
    WorkoutPlanIn,
    WorkoutPlanOut,
    WorkoutPlanRequest,
    WorkoutPlanSave,
)

__all__ = [
    "AuthUserOut",
    "ProfileEnvelope",
    "ProfileIn",
    "ProfileSaved",
    "ChatRequest",
    "ChatResponse",
    "MealPlanGenerated",
    "MealPlanIn",
    "MealPlanOut",
    "MealPlanRequest",
    "WorkoutPlanGenerated",
    "WorkoutPlanIn",
    "WorkoutPlanOut",
    "WorkoutPlanRequest",
    "WorkoutPlanSave",
]
