"""
core/nutrition_calc.py
────────────────────────────────────────────────────────────────────────
Daily energy + macro targets for a complete profile:

1. BMR  (Mifflin–St Jeor)
2. TDEE (activity multiplier)
3. Target calories for the fitness goal
4. Protein / carbs / fat grams from goal-specific ratios

Pure and deterministic: the same input always yields the same targets.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import TypedDict

Logger = logging.getLogger(__name__)

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extremely_active": 1.9,
}
_FALLBACK_MULTIPLIER = 1.2

# goal keyword groups (matched against the lower-cased goal)
_LOSS = ("lose weight", "weight loss", "cut")
_GAIN = ("gain weight", "weight gain", "bulk")
_MUSCLE_KCAL = ("build muscle", "muscle gain")
_MUSCLE_MACROS = ("build muscle", "muscle gain", "bulk")

# (protein, fat, carbs) shares of target calories
_LOSS_RATIOS = (0.35, 0.25, 0.40)
_MUSCLE_RATIOS = (0.30, 0.25, 0.45)
_DEFAULT_RATIOS = (0.30, 0.30, 0.40)


class InvalidProfileInput(ValueError):
    """Raised when weight, height or age is unusable, or the targets they give are."""


class NutritionTargets(TypedDict):
    bmr: int
    tdee: int
    target_calories: int
    target_protein: int
    target_carbs: int
    target_fat: int


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like a calculator does (2.5 -> 3), not banker's rounding."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


# ──────────────────────────────────────────────────────────────────────
#  Input dataclass
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class BodyStats:
    age: int
    gender: str            # "male" | "female" | "other"
    weight_kg: float
    height_cm: float
    activity_level: str    # key of ACTIVITY_MULTIPLIERS
    goal: str              # free text, e.g. "build muscle"

    @property
    def is_male(self) -> bool:
        return str(self.gender).strip().lower() == "male"

    @property
    def goal_key(self) -> str:
        return (self.goal or "").strip().lower()

    def validate(self) -> None:
        for name in ("weight_kg", "height_cm", "age"):
            _require_positive(name, getattr(self, name))


def _require_positive(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidProfileInput(f"{name} must be a number, got {value!r}")
    try:
        finite = math.isfinite(value)
    except OverflowError:           # ints too large for a float
        finite = False
    if not finite or value <= 0:
        raise InvalidProfileInput(f"{name} must be a positive finite number")


def _require_usable(name: str, value: float) -> None:
    # valid inputs can still combine into a non-positive target
    if not math.isfinite(value) or value <= 0:
        raise InvalidProfileInput(f"computed {name} is not positive ({value:.0f})")


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class NutritionalCalculator:
    """Source-of-truth for bmr / tdee / kcal / macros."""

    # --------------- public entrypoint --------------------------------
    def targets(self, u: BodyStats) -> NutritionTargets:
        u.validate()
        bmr = self.bmr(u)
        tdee = self.tdee(u)
        kcal = self.target_calories(u)
        _require_usable("bmr", bmr)
        _require_usable("tdee", tdee)
        _require_usable("target_calories", kcal)
        macros = self.macro_targets(u, kcal)
        Logger.debug("targets goal=%r bmr=%.2f tdee=%.2f kcal=%.2f", u.goal, bmr, tdee, kcal)
        return {
            "bmr": int(round_half_up(bmr)),
            "tdee": int(round_half_up(tdee)),
            "target_calories": int(round_half_up(kcal)),
            "target_protein": int(round_half_up(macros["protein_g"])),
            "target_carbs": int(round_half_up(macros["carbs_g"])),
            "target_fat": int(round_half_up(macros["fat_g"])),
        }

    # --------------- BMR / TDEE -------------------------------------
    def bmr(self, u: BodyStats) -> float:
        base = 10 * u.weight_kg + 6.25 * u.height_cm - 5 * u.age
        return base + (5 if u.is_male else -161)

    def tdee(self, u: BodyStats) -> float:
        return self.bmr(u) * activity_multiplier(u.activity_level)

    # --------------- Calories ---------------------------------------
    def target_calories(self, u: BodyStats) -> float:
        tdee_val = self.tdee(u)
        goal = u.goal_key
        if goal in _LOSS:
            return tdee_val - 500
        if goal in _GAIN:
            return tdee_val + 500
        if goal in _MUSCLE_KCAL:
            return tdee_val + 300
        return tdee_val  # maintain / anything else

    # --------------- Macros -----------------------------------------
    def macro_targets(self, u: BodyStats, kcal: float) -> dict[str, float]:
        prot_pc, fat_pc, carbs_pc = macro_ratios(u.goal)
        return {
            "protein_g": prot_pc * kcal / KCAL_PER_G_PROTEIN,
            "carbs_g": carbs_pc * kcal / KCAL_PER_G_CARBS,
            "fat_g": fat_pc * kcal / KCAL_PER_G_FAT,
        }


def activity_multiplier(level: str | None) -> float:
    return ACTIVITY_MULTIPLIERS.get((level or "").strip().lower(), _FALLBACK_MULTIPLIER)


def macro_ratios(goal: str | None) -> tuple[float, float, float]:
    """(protein, fat, carbs) shares of the calorie target for `goal`."""
    g = (goal or "").strip().lower()
    if g in _LOSS:
        return _LOSS_RATIOS
    if g in _MUSCLE_MACROS:
        return _MUSCLE_RATIOS
    return _DEFAULT_RATIOS
