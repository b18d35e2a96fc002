"""Nutrition goal calculation and the profile flows that persist it."""

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from macro_tracker.domain.goals import (
    ActivityLevel,
    Gender,
    GoalBreakdown,
    NutritionGoals,
    UserBiometrics,
    WeightEntry,
    WeightGoal,
)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LOW_ACTIVE: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.55

GOAL_FACTORS: dict[WeightGoal, float] = {
    WeightGoal.LOSE: 0.8,
    WeightGoal.MAINTAIN: 1.0,
    WeightGoal.GAIN: 1.15,
}

PROTEIN_SHARE = 0.3
FAT_SHARE = 0.3
CARBS_SHARE = 0.4
KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_FAT = 9
KCAL_PER_GRAM_CARBS = 4

POUNDS_PER_KG = 2.20462
WEIGHT_LIMITS: dict[str, tuple[float, float]] = {
    "kg": (30.0, 200.0),
    "lb": (66.0, 440.0),
}

_logger = logging.getLogger(__name__)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's Math.round, halves go up."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def calculate_bmr(
    weight_kg: float, height_cm: float, age_years: float, gender: Gender
) -> float:
    """Mifflin-St Jeor basal metabolic rate in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    if gender is Gender.FEMALE:
        return base - 161
    return base + 5


def activity_multiplier(level: ActivityLevel | str | None) -> float:
    """Return the TDEE multiplier for an activity level."""
    parsed = level if isinstance(level, ActivityLevel) else ActivityLevel.parse(level)
    if parsed is None:
        return DEFAULT_ACTIVITY_MULTIPLIER
    return ACTIVITY_MULTIPLIERS[parsed]


def calculate_tdee(bmr: float, level: ActivityLevel | str | None) -> float:
    """Total daily energy expenditure."""
    return bmr * activity_multiplier(level)


def apply_goal_adjustment(tdee: float, goal: WeightGoal | str | None) -> float:
    """Apply the deficit or surplus for the user's goal."""
    parsed = goal if isinstance(goal, WeightGoal) else WeightGoal.parse(goal)
    return tdee * GOAL_FACTORS[parsed]


def split_macros(calories: float) -> tuple[int, int, int]:
    """Split calories 30/30/40 into protein, fat and carb grams."""
    protein = round_half_up(calories * PROTEIN_SHARE / KCAL_PER_GRAM_PROTEIN)
    fats = round_half_up(calories * FAT_SHARE / KCAL_PER_GRAM_FAT)
    carbs = round_half_up(calories * CARBS_SHARE / KCAL_PER_GRAM_CARBS)
    return int(protein), int(fats), int(carbs)


def calculate_breakdown(biometrics: UserBiometrics) -> GoalBreakdown:
    """Compute goals and keep the intermediate BMR/TDEE figures."""
    bmr = calculate_bmr(
        biometrics.weight_kg,
        biometrics.height_cm,
        biometrics.age,
        biometrics.gender,
    )
    multiplier = activity_multiplier(biometrics.activity_level)
    tdee = bmr * multiplier
    calories = apply_goal_adjustment(tdee, biometrics.goal)
    protein, fats, carbs = split_macros(calories)
    goals = NutritionGoals(
        calorie_goal=int(round_half_up(calories)),
        protein=protein,
        fats=fats,
        carbs=carbs,
    )
    return GoalBreakdown(bmr=bmr, tdee=tdee, multiplier=multiplier, goals=goals)


def compute_goals(biometrics: UserBiometrics) -> NutritionGoals:
    """Compute daily calorie and macro goals from biometrics."""
    return calculate_breakdown(biometrics).goals


def convert_weight(value: float, from_unit: str, to_unit: str) -> float:
    """Convert between kg and lb, rounded to 0.1."""
    if from_unit == to_unit:
        return round_half_up(value, 1)
    if from_unit == "kg" and to_unit == "lb":
        return round_half_up(value * POUNDS_PER_KG, 1)
    if from_unit == "lb" and to_unit == "kg":
        return round_half_up(value / POUNDS_PER_KG, 1)
    raise ValueError(f"Unsupported weight unit conversion: {from_unit} -> {to_unit}")


def clamp_weight(value: float, unit: str = "kg") -> float:
    """Clamp a weight to the accepted range for its unit, rounded to 0.1."""
    if unit not in WEIGHT_LIMITS:
        raise ValueError(f"Unsupported weight unit: {unit}")
    low, high = WEIGHT_LIMITS[unit]
    return round_half_up(max(low, min(high, value)), 1)


def parse_weight_input(text: str, unit: str = "kg") -> float | None:
    """Parse typed weight, clamped to the unit's range and rounded to 0.1."""
    try:
        value = float(text.strip().replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return clamp_weight(value, unit)


class ProfileNotFoundError(LookupError):
    """Raised when a user has no stored profile."""


class ProfileRepository(Protocol):
    """Persistence interface for user profile documents."""

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the stored profile fields, if any."""

    def update_profile(self, user_id: str, changes: dict[str, object]) -> None:
        """Merge the given fields into the stored profile."""


class WeightLogRepository(Protocol):
    """Persistence interface for logged weights."""

    def add_weight_entry(
        self, user_id: str, weight_kg: float, logged_at: datetime
    ) -> WeightEntry:
        """Store a weight entry and return it."""

    def list_weight_entries(self, user_id: str, limit: int) -> list[WeightEntry]:
        """Return the most recent weight entries, newest first."""

    def list_weight_entries_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[WeightEntry]:
        """Return weight entries logged in [start, end), oldest first."""


@dataclass
class GoalService:
    """Keeps stored nutrition goals in step with the user's profile."""

    profile_repository: ProfileRepository
    weight_repository: WeightLogRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def recalculate(self, user_id: str) -> NutritionGoals:
        """Recompute goals from the stored profile and persist them."""
        profile = self._require_profile(user_id)
        goals = compute_goals(UserBiometrics.from_profile(profile))
        self.profile_repository.update_profile(user_id, goals.to_profile())
        _logger.info(
            "Recalculated goals: user=%s calories=%s", user_id, goals.calorie_goal
        )
        return goals

    def update_profile(
        self, user_id: str, changes: Mapping[str, object]
    ) -> NutritionGoals:
        """Merge biometric edits and store them with freshly computed goals."""
        profile = self._require_profile(user_id)
        merged = {**profile, **changes}
        goals = compute_goals(UserBiometrics.from_profile(merged))
        self.profile_repository.update_profile(
            user_id, {**dict(changes), **goals.to_profile()}
        )
        return goals

    def log_weight(
        self, user_id: str, weight: float, unit: str = "kg"
    ) -> tuple[WeightEntry, NutritionGoals]:
        """Record a weight and recompute goals with it.

        The reading is clamped to the unit's accepted range and stored in kg
        rounded to 0.1. Unknown units raise ValueError.
        """
        weight_kg = convert_weight(clamp_weight(weight, unit), unit, "kg")
        profile = self._require_profile(user_id)
        entry = self.weight_repository.add_weight_entry(
            user_id, weight_kg=weight_kg, logged_at=self.clock()
        )
        goals = compute_goals(
            UserBiometrics.from_profile({**profile, "weight": weight_kg})
        )
        self.profile_repository.update_profile(
            user_id, {"weight": weight_kg, **goals.to_profile()}
        )
        _logger.info(
            "Logged weight: user=%s weight_kg=%.1f calories=%s",
            user_id,
            weight_kg,
            goals.calorie_goal,
        )
        return entry, goals

    def weight_history(self, user_id: str, limit: int = 30) -> list[WeightEntry]:
        """Return recent weight entries."""
        return self.weight_repository.list_weight_entries(user_id, limit)

    def _require_profile(self, user_id: str) -> dict[str, object]:
        profile = self.profile_repository.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile
