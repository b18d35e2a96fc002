"""User-created foods."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from macro_tracker.domain.nutrition import (
    BASE_REFERENCE_GRAMS,
    CustomFood,
    MacroProfile,
    NutritionRecord,
)
from macro_tracker.services.servings import parse_leading_number

CUSTOM_BRAND = "Custom"
CUSTOM_SOURCE = "Custom"
DEFAULT_SERVING_UNIT = "g"

_INVALID_CALORIES = "Please enter a valid calorie value."

NumberInput = str | float | None

_logger = logging.getLogger(__name__)


class CustomFoodValidationError(ValueError):
    """Raised when a custom food is missing its name or calories."""


class CustomFoodRepository(Protocol):
    """Persistence interface for user-created foods."""

    def add_custom_food(self, food: CustomFood) -> CustomFood:
        """Store a custom food and return it with its id."""

    def list_custom_foods(self, user_id: str) -> list[CustomFood]:
        """Return a user's custom foods, newest first."""


def _number_or_default(raw: NumberInput, default: float) -> float:
    if isinstance(raw, int | float):
        value = float(raw)
    else:
        value = parse_leading_number(raw)
    if value is None or not math.isfinite(value) or value == 0:
        return default
    return value


def _strict_calories(raw: NumberInput) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise CustomFoodValidationError(_INVALID_CALORIES)
    try:
        value = float(raw)
    except ValueError as exc:
        raise CustomFoodValidationError(_INVALID_CALORIES) from exc
    if not math.isfinite(value):
        raise CustomFoodValidationError(_INVALID_CALORIES)
    return value


@dataclass
class CustomFoodService:
    """Creates and looks up foods users entered themselves."""

    repository: CustomFoodRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def create_food(
        self,
        user_id: str,
        *,
        name: str,
        calories: NumberInput,
        brand: str | None = None,
        description: str | None = None,
        serving_size: NumberInput = None,
        serving_unit: str | None = None,
        protein: NumberInput = None,
        carbs: NumberInput = None,
        fat: NumberInput = None,
        image_url: str | None = None,
    ) -> CustomFood:
        """Validate and store a custom food.

        A name and a numeric calorie value are required. The brand defaults
        to "Custom", the serving to 100 g, and missing macros to 0.
        """
        clean_name = name.strip()
        if not clean_name:
            raise CustomFoodValidationError("Please enter a name for your food.")
        kcal = _strict_calories(calories)

        size = _number_or_default(serving_size, BASE_REFERENCE_GRAMS)
        if size < 0:
            size = BASE_REFERENCE_GRAMS
        unit = (serving_unit or "").strip() or DEFAULT_SERVING_UNIT
        record = NutritionRecord(
            name=clean_name,
            brand=(brand or "").strip() or CUSTOM_BRAND,
            macros=MacroProfile(
                calories=kcal,
                protein=_number_or_default(protein, 0.0),
                fat=_number_or_default(fat, 0.0),
                carbs=_number_or_default(carbs, 0.0),
            ),
            serving_qty=size,
            serving_unit=unit,
            base_grams=size if unit == DEFAULT_SERVING_UNIT else BASE_REFERENCE_GRAMS,
            image_url=image_url,
            source=CUSTOM_SOURCE,
        )
        saved = self.repository.add_custom_food(
            CustomFood(
                user_id=user_id,
                record=record,
                description=(description or "").strip(),
                created_at=self.clock(),
            )
        )
        _logger.info("Custom food created: user=%s name=%s", user_id, clean_name)
        return saved

    def list_foods(self, user_id: str, query: str = "") -> list[CustomFood]:
        """Return custom foods whose name or brand contains the query."""
        needle = query.strip().lower()
        foods = self.repository.list_custom_foods(user_id)
        if not needle:
            return foods
        return [
            food
            for food in foods
            if needle in food.record.name.lower()
            or needle in (food.record.brand or "").lower()
        ]
