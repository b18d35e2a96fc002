"""Nutrition domain models."""

from dataclasses import dataclass
from datetime import datetime

BASE_REFERENCE_GRAMS = 100.0


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile for a food item."""

    calories: float
    protein: float
    fat: float
    carbs: float

    def scaled(self, factor: float) -> "MacroProfile":
        """Return every macro multiplied by the same factor."""
        return MacroProfile(
            calories=self.calories * factor,
            protein=self.protein * factor,
            fat=self.fat * factor,
            carbs=self.carbs * factor,
        )

    def __add__(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            carbs=self.carbs + other.carbs,
        )


ZERO_MACROS = MacroProfile(calories=0.0, protein=0.0, fat=0.0, carbs=0.0)


@dataclass(frozen=True)
class NutritionRecord:
    """Per-serving nutrition for a food as returned by a food database."""

    name: str
    brand: str | None
    macros: MacroProfile
    serving_qty: float = 1.0
    serving_unit: str = "serving"
    base_grams: float = BASE_REFERENCE_GRAMS
    image_url: str | None = None
    source: str | None = None

    @property
    def is_branded(self) -> bool:
        """Branded foods are portioned by servings, generic ones by grams."""
        return bool(self.brand and self.brand.strip())


@dataclass(frozen=True)
class MealEntry:
    """A logged meal with already adjusted macros."""

    user_id: str
    name: str
    brand: str | None
    macros: MacroProfile
    serving: str
    logged_at: datetime
    image_url: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class CustomFood:
    """A food a user entered by hand."""

    user_id: str
    record: NutritionRecord
    description: str = ""
    created_at: datetime | None = None
    id: str | None = None
