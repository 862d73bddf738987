"""
Centralised settings loader.

Values come from the process environment first, then `.env`.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic_settings import BaseSettings


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB ───────────────────────────────────────────────
    env_name: str = "local"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://localhost:5432/fitchat"

    # ─── auth (hosted provider signs HS256 access tokens) ──────────
    supabase_jwt_secret: str = "changeme"
    jwt_audience: str = "authenticated"

    # ─── Gemini ────────────────────────────────────────────────────
    gemini_api_key: str | None = None
    gemini_model: str = "models/gemini-2.0-flash"

    # ─── conversational / RAG agent ────────────────────────────────
    chat_api_url: str | None = None
    http_timeout_s: float = 30.0

    # comma separated; "*" for the public demo
    cors_origins: str = "*"

    # allow other teammates’ env-vars without crashing
    model_config = {"extra": "ignore", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
