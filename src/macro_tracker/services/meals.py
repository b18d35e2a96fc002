"""Meal logging built on adjusted servings."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol

from macro_tracker.domain.nutrition import (
    ZERO_MACROS,
    MacroProfile,
    MealEntry,
    NutritionRecord,
)
from macro_tracker.services.goals import round_half_up
from macro_tracker.services.servings import (
    DEFAULT_GRAMS,
    MIN_SERVING_COUNT,
    adjust_serving,
    describe_serving,
)

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Persistence interface for logged meals."""

    def add_meal(self, entry: MealEntry) -> MealEntry:
        """Store a meal and return it with its id."""

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[MealEntry]:
        """Return meals logged in [start, end)."""

    def update_meal(
        self, user_id: str, meal_id: str, macros: MacroProfile, serving: str
    ) -> MealEntry | None:
        """Replace a meal's macros and serving; None when it doesn't exist."""

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        """Delete a meal; False when it doesn't exist."""


class MealNotFoundError(LookupError):
    """Raised when a user has no meal with the given id."""


@dataclass
class MealLogService:
    """Service for logging meals and summarizing a day."""

    repository: MealLogRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def log_meal(
        self,
        user_id: str,
        record: NutritionRecord,
        serving_count: int = MIN_SERVING_COUNT,
        grams_input: float = DEFAULT_GRAMS,
    ) -> MealEntry:
        """Adjust the record to the chosen portion and store it."""
        entry = MealEntry(
            user_id=user_id,
            name=record.name,
            brand=record.brand,
            macros=adjust_serving(record, serving_count, grams_input),
            serving=describe_serving(record, serving_count, grams_input),
            logged_at=self.clock(),
            image_url=record.image_url,
        )
        saved = self.repository.add_meal(entry)
        _logger.info(
            "Meal logged: user=%s name=%s calories=%s",
            user_id,
            record.name,
            entry.macros.calories,
        )
        return saved

    def update_meal(
        self,
        user_id: str,
        meal_id: str,
        record: NutritionRecord,
        serving_count: int = MIN_SERVING_COUNT,
        grams_input: float = DEFAULT_GRAMS,
    ) -> MealEntry:
        """Re-portion a logged meal from its base nutrition record."""
        updated = self.repository.update_meal(
            user_id,
            meal_id,
            macros=adjust_serving(record, serving_count, grams_input),
            serving=describe_serving(record, serving_count, grams_input),
        )
        if updated is None:
            raise MealNotFoundError(meal_id)
        _logger.info("Meal updated: user=%s meal=%s", user_id, meal_id)
        return updated

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Remove a logged meal."""
        if not self.repository.delete_meal(user_id, meal_id):
            raise MealNotFoundError(meal_id)
        _logger.info("Meal deleted: user=%s meal=%s", user_id, meal_id)

    def daily_totals(self, user_id: str, day: date) -> MacroProfile:
        """Sum the macros of every meal logged on the given UTC day."""
        return self.totals_by_day(user_id, day, day).get(day, ZERO_MACROS)

    def totals_by_day(
        self, user_id: str, start: date, end: date
    ) -> dict[date, MacroProfile]:
        """Sum meals per UTC day from start to end inclusive.

        Days without meals are left out.
        """
        range_start = datetime.combine(start, time.min, tzinfo=UTC)
        range_end = datetime.combine(end, time.min, tzinfo=UTC) + timedelta(days=1)
        totals: dict[date, MacroProfile] = {}
        for meal in self.repository.list_meals(user_id, range_start, range_end):
            day = meal.logged_at.astimezone(UTC).date()
            totals[day] = totals.get(day, ZERO_MACROS) + meal.macros
        return {day: _round_totals(macros) for day, macros in sorted(totals.items())}


def _round_totals(totals: MacroProfile) -> MacroProfile:
    return MacroProfile(
        calories=round_half_up(totals.calories, 1),
        protein=round_half_up(totals.protein, 1),
        fat=round_half_up(totals.fat, 1),
        carbs=round_half_up(totals.carbs, 1),
    )
