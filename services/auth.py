"""Verify access tokens issued by the hosted auth provider (HS256 JWTs)."""

from datetime import datetime, timedelta, timezone
import logging

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings

logger = logging.getLogger(__name__)

_ALGO = "HS256"
security = HTTPBearer(auto_error=False)


def create_token(user_id: str, ttl_minutes: int = 60, **claims) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    payload = {"sub": user_id, "exp": exp, "aud": settings.jwt_audience, **claims}
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm=_ALGO)


def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=[_ALGO],
        audience=settings.jwt_audience,
    )


def verify_token(token: str) -> str:
    return decode_token(token)["sub"]


# Dependencies
def current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="No authorization header")
    try:
        claims = decode_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.info("rejected token: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return claims


def current_user_id(claims: dict = Depends(current_claims)) -> str:
    return claims["sub"]


def optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Like current_user_id, but anonymous callers get None instead of a 401."""
    if credentials is None:
        return None
    try:
        return verify_token(credentials.credentials)
    except (jwt.PyJWTError, KeyError):
        return None
