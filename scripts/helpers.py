import re
import json

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def extract_clean_json(raw: str | dict) -> dict:
    """Parse an LLM reply that should be a JSON object, tolerating ``` fences.

    Raises ValueError when no JSON object can be recovered.
    """
    if isinstance(raw, dict):
        return raw

    text = _FENCE.sub("", raw.strip()).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # prose around the object: take the outermost {...}
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object found in model response")
        data = json.loads(text[start : end + 1])

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
