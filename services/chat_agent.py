"""
services/chat_agent.py
────────────────────────────────────────────────────────────────────────
Thin async client for the external conversational (RAG) agent.

Two calls: `/chat` for the assistant reply and `/meal-plan` for the
agent-side meal planner. Both raise httpx.HTTPError on any transport or
status failure; callers decide the fallback.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from config import settings

_LOG = logging.getLogger(__name__)


class AgentUnavailable(httpx.HTTPError):
    """No agent URL configured."""


def _base_url() -> str:
    url = (settings.chat_api_url or "").rstrip("/")
    if not url:
        raise AgentUnavailable("CHAT_API_URL not configured")
    return url


async def _post(path: str, payload: dict[str, Any]) -> dict[str, Any]:
    url = f"{_base_url()}{path}"
    async with httpx.AsyncClient(timeout=settings.http_timeout_s) as http:
        r = await http.post(url, json=payload)
    r.raise_for_status()
    data = r.json()
    if not isinstance(data, dict):
        raise httpx.DecodingError(f"unexpected payload from {path}")
    return data


async def send_chat(message: str, user_id: str) -> dict[str, Any]:
    """Forward one user message; returns the agent’s JSON body as-is."""
    _LOG.debug("→ agent /chat user=%s len=%d", user_id, len(message))
    return await _post("/chat", {"message": message, "user_id": user_id})


async def request_meal_plan(payload: dict[str, Any]) -> dict[str, Any]:
    return await _post("/meal-plan", payload)
