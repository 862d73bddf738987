"""
core/extractor.py
────────────────────────────────────────────────────────────────────────
Best-effort extraction of personal details from a free-text chat message.

Each field has its own matcher returning a typed value or None; the
matchers are independent and run in a fixed order. Nothing here raises:
a message that mentions nothing recognisable yields an empty update.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from core.models.profile import ExtractedUpdate, Gender
from core.nutrition_calc import round_half_up

_LOG = logging.getLogger(__name__)

LBS_TO_KG = 0.453592
CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54

_I = re.IGNORECASE

# ──────────────── detection gate ─────────────────
_HAS_AGE = re.compile(r"\b(?:i am|i'm)\s+\d+|\d+\s+(?:years old|year old|yo)\b|\bage\s*:?\s*\d+", _I)
_HAS_WEIGHT = re.compile(r"\b\d+(?:\.\d+)?\s*(?:kg|kgs|kilos?|pounds?|lbs?)\b", _I)
_HAS_HEIGHT = re.compile(
    r"\b\d+(?:\.\d+)?\s*(?:cm|centimeters?|ft|feet|inches?|'|\")(?:\b|\s|$)|\b(?:tall|height)\s+\d+", _I
)
_HAS_GENDER = re.compile(r"\b(?:male|female|man|woman|boy|girl|guy|lady)\b", _I)
_HAS_GOAL = re.compile(
    r"\b(?:lose weight|weight loss|losing weight|shed weight|drop weight|lose fat|cut"
    r"|gain weight|weight gain|gaining weight|bulk|bulking"
    r"|build muscle|muscle gain|gaining muscle|get stronger|strength|muscle building"
    r"|maintain|maintenance|stay the same|keep weight)\b",
    _I,
)

# ──────────────── field patterns ─────────────────
# integer parts are capped so a runaway digit string is not a match
_AGE = re.compile(
    r"\b(?:i am|i'm)\s+(\d{1,3})(?!\d)(?:\s+(?:years old|year old|yo))?"
    r"|\b(\d{1,3})\s+(?:years old|year old|yo)\b"
    r"|\bage\s*:?\s*(\d{1,3})(?!\d)",
    _I,
)
_WEIGHT = re.compile(
    r"\b(?:weigh|weight)\s*(?:is\s*)?(\d{1,4}(?:\.\d+)?)\s*(kg|kgs|kilos?|pounds?|lbs?)\b"
    r"|\b(\d{1,4}(?:\.\d+)?)\s*(kg|kgs|kilos?|pounds?|lbs?)\b",
    _I,
)
_HEIGHT_CM = re.compile(
    r"\b(\d{1,4}(?:\.\d+)?)\s*(?:cm|centimeters?)\s*(?:tall|height)?"
    r"|\b(?:height|tall)\s*(?:is\s*)?(\d{1,4}(?:\.\d+)?)\s*(?:cm|centimeters?)\b",
    _I,
)
_HEIGHT_FT = re.compile(
    r"\b(\d{1,2})\s*(?:ft|feet|')\s*(\d{1,2}(?!\d))?\s*(?:in|inches?|\")?\s*(?:tall|height)?"
    r"|\b(?:height|tall)\s*(?:is\s*)?(\d{1,2})\s*(?:ft|feet|')\s*(\d{1,2}(?!\d))?\s*(?:in|inches?|\")?\b",
    _I,
)
_MALE = re.compile(r"\b(?:i am|i'm)\s*(?:a\s*)?(?:male|man|boy|guy)\b|\b(?:male|man|boy|guy)\b", _I)
_FEMALE = re.compile(
    r"\b(?:i am|i'm)\s*(?:a\s*)?(?:female|woman|girl|lady)\b|\b(?:female|woman|girl|lady)\b", _I
)

# first matching group wins
_GOALS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(?:lose weight|weight loss|losing weight|shed weight|drop weight)\b", _I), "lose weight"),
    (re.compile(r"\b(?:gain weight|weight gain|gaining weight|bulk|bulking)\b", _I), "gain weight"),
    (
        re.compile(r"\b(?:build muscle|muscle gain|gaining muscle|get stronger|strength|muscle building)\b", _I),
        "build muscle",
    ),
    (re.compile(r"\b(?:maintain|maintenance|stay the same|keep weight)\b", _I), "maintain weight"),
]


def _first_group(m: re.Match[str], *idx: int) -> str | None:
    for i in idx:
        if m.group(i):
            return m.group(i)
    return None


# ──────────────── public API ─────────────────
def detect_personal_info(message: str) -> bool:
    """Cheap pre-check: does the message look like it carries profile details?"""
    return any(
        p.search(message) for p in (_HAS_AGE, _HAS_WEIGHT, _HAS_HEIGHT, _HAS_GENDER, _HAS_GOAL)
    )


def extract_age(message: str) -> int | None:
    m = _AGE.search(message)
    if not m:
        return None
    raw = _first_group(m, 1, 2, 3)
    return int(raw) if raw else None


def extract_weight(message: str) -> float | None:
    """Weight in kg; pounds are converted."""
    m = _WEIGHT.search(message)
    if not m:
        return None
    if m.group(1):
        value, unit = float(m.group(1)), m.group(2)
    else:
        value, unit = float(m.group(3)), m.group(4)
    if unit.lower().startswith(("lb", "pound")):
        value *= LBS_TO_KG
    return round_half_up(value, 1)


def extract_height(message: str) -> float | None:
    """Height in cm; a centimetre mention beats feet/inches."""
    m = _HEIGHT_CM.search(message)
    if m:
        return round_half_up(float(_first_group(m, 1, 2)), 1)

    m = _HEIGHT_FT.search(message)
    if m:
        feet = int(_first_group(m, 1, 3))
        inches = int(_first_group(m, 2, 4) or 0)
        return round_half_up(feet * CM_PER_FOOT + inches * CM_PER_INCH, 1)
    return None


def extract_gender(message: str) -> Gender | None:
    if _MALE.search(message):
        return Gender.male
    if _FEMALE.search(message):
        return Gender.female
    return None


def extract_goal(message: str) -> str | None:
    for pattern, goal in _GOALS:
        if pattern.search(message):
            return goal
    return None


MATCHERS: list[tuple[str, Callable[[str], Any]]] = [
    ("age", extract_age),
    ("weight", extract_weight),
    ("height", extract_height),
    ("gender", extract_gender),
    ("fitness_goal", extract_goal),
]


def extract_update(message: str) -> ExtractedUpdate:
    """Run every matcher over `message`; unmatched fields stay unset."""
    if not message or not detect_personal_info(message):
        return ExtractedUpdate()

    found: dict[str, Any] = {}
    for field, matcher in MATCHERS:
        value = matcher(message)
        if value is not None:
            found[field] = value

    if found:
        _LOG.debug("extracted fields %s", sorted(found))
    return ExtractedUpdate(**found)
