"""Food search service backed by FatSecret."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from macro_tracker.adapters.fatsecret_client import FatSecretClient
from macro_tracker.domain.nutrition import MacroProfile, NutritionRecord

_CALORIES_PATTERN = re.compile(r"Calories: (\d+)kcal")
_FAT_PATTERN = re.compile(r"Fat: ([\d.]+)g")
_CARBS_PATTERN = re.compile(r"Carbs: ([\d.]+)g")
_PROTEIN_PATTERN = re.compile(r"Protein: ([\d.]+)g")

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class FoodSearchService:
    """Searches a food database and returns nutrition records."""

    client: FatSecretClient
    max_results: int = 50
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, page: int = 0) -> list[NutritionRecord]:
        """Search foods and parse their per-serving macros."""
        expression = query.strip()
        if not expression:
            return []
        payload = await self._call_with_retry(
            lambda: self.client.search_foods(
                expression, max_results=self.max_results, page_number=page
            ),
            action=f"search:{expression}",
        )
        records = [_to_record(food) for food in _food_items(payload)]
        _logger.info("Food search: query=%s results=%s", expression, len(records))
        return records

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Food %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _food_items(payload: dict[str, object]) -> list[dict[str, object]]:
    """FatSecret returns a bare object instead of a list for one result."""
    foods = payload.get("foods")
    if not isinstance(foods, dict):
        return []
    food = foods.get("food")
    if isinstance(food, dict):
        return [food]
    if isinstance(food, list):
        return [item for item in food if isinstance(item, dict)]
    return []


def _to_record(food: dict[str, object]) -> NutritionRecord:
    description = food.get("food_description")
    text = description if isinstance(description, str) else ""
    brand = food.get("brand_name")
    return NutritionRecord(
        name=str(food.get("food_name", "")),
        brand=brand if isinstance(brand, str) and brand else None,
        macros=parse_food_description(text),
        serving_qty=1.0,
        serving_unit="serving",
        source="FatSecret",
    )


def parse_food_description(text: str) -> MacroProfile:
    """Extract macros from e.g. 'Per 100g - Calories: 89kcal | Fat: 0.33g ...'."""
    return MacroProfile(
        calories=_match_number(_CALORIES_PATTERN, text),
        protein=_match_number(_PROTEIN_PATTERN, text),
        fat=_match_number(_FAT_PATTERN, text),
        carbs=_match_number(_CARBS_PATTERN, text),
    )


def _match_number(pattern: re.Pattern[str], text: str) -> float:
    match = pattern.search(text)
    if match is None:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0
