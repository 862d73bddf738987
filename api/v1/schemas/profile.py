from __future__ import annotations

from pydantic import BaseModel

from core.models.profile import ProfileDraft, UserProfile


class ProfileIn(ProfileDraft):
    """Profile form body; derived fields sent by the client are ignored."""


class ProfileEnvelope(BaseModel):
    profile: UserProfile | None


class ProfileSaved(BaseModel):
    profile: UserProfile
    message: str = "Profile saved successfully"


class AuthUser(BaseModel):
    id: str
    email: str | None = None
    role: str | None = None


class AuthUserOut(BaseModel):
    user: AuthUser
