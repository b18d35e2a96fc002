"""Serving-size scaling for food nutrition records."""

import math
import re

from macro_tracker.domain.nutrition import MacroProfile, NutritionRecord
from macro_tracker.services.goals import round_half_up

MIN_SERVING_COUNT = 1
DEFAULT_GRAMS = 100.0

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_number(text: str | None) -> float | None:
    """Read the number a string starts with, e.g. 150 from "150 g".

    A comma counts as the decimal separator. Returns None when the text does
    not start with a number.
    """
    if text is None:
        return None
    match = _LEADING_NUMBER.match(text.replace(",", "."))
    if match is None:
        return None
    value = float(match.group(1))
    return value if math.isfinite(value) else None


def parse_grams(text: str | None) -> float:
    """Parse a free-text gram amount, 0.0 when it isn't a usable number."""
    value = parse_leading_number(text)
    if value is None or value < 0:
        return 0.0
    return value


def step_serving_count(current: int, delta: int) -> int:
    """Move the serving stepper, never below one serving."""
    return max(MIN_SERVING_COUNT, current + delta)


def adjust_serving(
    record: NutritionRecord,
    serving_count: int = MIN_SERVING_COUNT,
    grams_input: float = DEFAULT_GRAMS,
) -> MacroProfile:
    """Scale a record's macros to the chosen portion.

    Branded foods are multiplied by the serving count; generic foods by the
    ratio of the entered grams to the record's base grams. Each field is
    rounded to one decimal on its own.
    """
    if record.is_branded:
        factor = float(max(MIN_SERVING_COUNT, serving_count))
    else:
        grams = grams_input if math.isfinite(grams_input) and grams_input > 0 else 0.0
        factor = grams / record.base_grams
    scaled = record.macros.scaled(factor)
    return MacroProfile(
        calories=round_half_up(scaled.calories, 1),
        protein=round_half_up(scaled.protein, 1),
        fat=round_half_up(scaled.fat, 1),
        carbs=round_half_up(scaled.carbs, 1),
    )


def describe_serving(
    record: NutritionRecord,
    serving_count: int = MIN_SERVING_COUNT,
    grams_input: float = DEFAULT_GRAMS,
) -> str:
    """Human-readable portion, e.g. '2 cup' or '150g'."""
    if record.is_branded:
        return f"{max(MIN_SERVING_COUNT, serving_count)} {record.serving_unit}"
    return f"{grams_input:g}g"
