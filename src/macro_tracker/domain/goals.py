"""Biometrics and nutrition goal domain models."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 175.0
DEFAULT_AGE_YEARS = 30


class Gender(StrEnum):
    """Biological sex used by the BMR equation."""

    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, raw: object) -> "Gender":
        """Parse a stored gender value, defaulting to male."""
        if isinstance(raw, str) and _normalize(raw) in {"female", "f", "woman"}:
            return cls.FEMALE
        return cls.MALE


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LOW_ACTIVE = "low active"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very active"

    @classmethod
    def parse(cls, raw: object) -> "ActivityLevel | None":
        """Return the matching level, or None when unrecognized."""
        if not isinstance(raw, str):
            return None
        try:
            return cls(_normalize(raw))
        except ValueError:
            return None


class WeightGoal(StrEnum):
    """Direction the user wants their weight to go."""

    LOSE = "lose weight"
    MAINTAIN = "maintain weight"
    GAIN = "gain weight"

    @classmethod
    def parse(cls, raw: object) -> "WeightGoal":
        """Parse a stored goal; anything unknown means maintain."""
        if not isinstance(raw, str):
            return cls.MAINTAIN
        value = _normalize(raw)
        if value in {"lose", "lose weight"}:
            return cls.LOSE
        if value in {"gain", "gain weight"}:
            return cls.GAIN
        return cls.MAINTAIN


@dataclass(frozen=True)
class UserBiometrics:
    """Inputs to the goal calculation."""

    age: int
    weight_kg: float
    height_cm: float
    gender: Gender
    activity_level: ActivityLevel | None
    goal: WeightGoal

    @classmethod
    def from_profile(cls, profile: Mapping[str, object]) -> "UserBiometrics":
        """Build biometrics from a stored profile document.

        Missing or malformed numbers fall back to the defaults instead of
        raising, so an incomplete profile still yields usable goals. An
        absent activity level resolves to moderate; an unrecognized one is
        kept as None and priced at the moderate multiplier.
        """
        raw_activity = profile.get("activityLevel")
        activity = ActivityLevel.parse(raw_activity)
        if raw_activity is None:
            activity = ActivityLevel.MODERATE
        return cls(
            age=int(_positive_number(profile.get("age"), DEFAULT_AGE_YEARS)),
            weight_kg=_positive_number(profile.get("weight"), DEFAULT_WEIGHT_KG),
            height_cm=_positive_number(profile.get("height"), DEFAULT_HEIGHT_CM),
            gender=Gender.parse(profile.get("gender")),
            activity_level=activity,
            goal=WeightGoal.parse(profile.get("goal")),
        )

    def to_profile(self) -> dict[str, object]:
        """Serialize back to profile document fields."""
        return {
            "age": self.age,
            "weight": self.weight_kg,
            "height": self.height_cm,
            "gender": self.gender.value,
            "activityLevel": (
                self.activity_level.value if self.activity_level else None
            ),
            "goal": self.goal.value,
        }


@dataclass(frozen=True)
class NutritionGoals:
    """Daily calorie and macro targets."""

    calorie_goal: int
    protein: int
    fats: int
    carbs: int

    def to_profile(self) -> dict[str, int]:
        """Return the profile fields these goals are stored under."""
        return {
            "calorieGoal": self.calorie_goal,
            "protein": self.protein,
            "fats": self.fats,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class GoalBreakdown:
    """Goals together with the intermediate energy figures."""

    bmr: float
    tdee: float
    multiplier: float
    goals: NutritionGoals


@dataclass(frozen=True)
class WeightEntry:
    """A single logged body weight."""

    user_id: str
    weight_kg: float
    logged_at: datetime


def _normalize(value: str) -> str:
    return " ".join(value.strip().lower().replace("-", " ").replace("_", " ").split())


def _positive_number(raw: object, default: float) -> float:
    if isinstance(raw, bool):
        return default
    if isinstance(raw, str):
        try:
            raw = float(raw.strip().replace(",", "."))
        except ValueError:
            return default
    if not isinstance(raw, int | float):
        return default
    value = float(raw)
    if not math.isfinite(value) or value <= 0:
        return default
    return value
