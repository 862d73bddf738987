# services/gemini.py
import logging
import random
import time

from google import genai
from google.genai import types, errors as gerrors

from config import settings

_LOG = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Gemini could not produce a usable response."""


# ───────────── Client (created on first use) ─────────────
_client: genai.Client | None = None


def _get_client() -> genai.Client:
    global _client
    if _client is None:
        if not settings.gemini_api_key:
            raise GenerationError("GEMINI_API_KEY not set in environment")
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


# ───────────── Generation (sync, retried on 429) ─────────────
def generate(
    prompt: str,
    temperature: float = 0.7,
    max_output_tokens: int = 2048,
    attempts: int = 3,
) -> str:
    """Run a completion and return the LLM’s text response."""
    client = _get_client()
    for attempt in range(attempts):
        try:
            resp = client.models.generate_content(
                model=settings.gemini_model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    temperature=temperature,
                    top_k=40,
                    top_p=0.95,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except gerrors.ClientError as e:
            if getattr(e, "status", None) == "RESOURCE_EXHAUSTED" and attempt + 1 < attempts:
                backoff = (2 ** attempt) + random.random()
                _LOG.warning("Gemini 429, retrying in %.1fs", backoff)
                time.sleep(backoff)
                continue
            raise GenerationError(f"Gemini generation failed: {e}") from e
        except gerrors.APIError as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

        text = resp.text
        if not text:
            raise GenerationError("Gemini returned an empty response")
        return text
    raise GenerationError("Gemini retries exhausted")
