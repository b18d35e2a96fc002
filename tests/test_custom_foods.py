"""Tests for user-created foods."""

import pytest

from macro_tracker.services.custom_foods import (
    CustomFoodService,
    CustomFoodValidationError,
)
from tests.conftest import FIXED_NOW, InMemoryCustomFoodRepository


def _service() -> tuple[CustomFoodService, InMemoryCustomFoodRepository]:
    repository = InMemoryCustomFoodRepository()
    return CustomFoodService(repository, clock=lambda: FIXED_NOW), repository


def test_create_food_fills_defaults() -> None:
    service, repository = _service()

    food = service.create_food("user-1", name="  Protein Bar ", calories="210")

    assert food.id == "food-1"
    assert food.created_at == FIXED_NOW
    record = food.record
    assert record.name == "Protein Bar"
    assert record.brand == "Custom"
    assert record.source == "Custom"
    assert (record.serving_qty, record.serving_unit, record.base_grams) == (
        100.0,
        "g",
        100.0,
    )
    assert (record.macros.protein, record.macros.fat, record.macros.carbs) == (
        0.0,
        0.0,
        0.0,
    )
    assert repository.foods == [food]


def test_create_food_reads_leading_numbers_for_optional_fields() -> None:
    service, _ = _service()

    food = service.create_food(
        "user-1",
        name="Overnight oats",
        calories=320,
        brand="Home",
        serving_size="250g",
        protein="12g",
        carbs="45.5 g",
        fat="7",
    )

    record = food.record
    assert record.brand == "Home"
    assert record.serving_qty == 250.0
    assert record.base_grams == 250.0
    assert (record.macros.protein, record.macros.carbs, record.macros.fat) == (
        12.0,
        45.5,
        7.0,
    )


def test_non_gram_unit_keeps_hundred_gram_base() -> None:
    service, _ = _service()

    food = service.create_food(
        "user-1", name="Smoothie", calories="180", serving_size=330, serving_unit="ml"
    )

    assert food.record.serving_qty == 330.0
    assert food.record.serving_unit == "ml"
    assert food.record.base_grams == 100.0


def test_non_positive_serving_size_falls_back_to_default() -> None:
    service, _ = _service()

    food = service.create_food("user-1", name="Soup", calories=90, serving_size=-5)

    assert food.record.serving_qty == 100.0


def test_name_is_required() -> None:
    service, repository = _service()

    with pytest.raises(CustomFoodValidationError):
        service.create_food("user-1", name="   ", calories="100")
    assert repository.foods == []


@pytest.mark.parametrize("calories", ["12abc", "", None, "inf"])
def test_calories_must_be_a_number(calories: str | None) -> None:
    service, repository = _service()

    with pytest.raises(CustomFoodValidationError):
        service.create_food("user-1", name="Mystery", calories=calories)
    assert repository.foods == []


def test_list_foods_filters_by_name_or_brand() -> None:
    service, _ = _service()
    service.create_food("user-1", name="Protein Bar", calories=210, brand="Acme")
    service.create_food("user-1", name="Granola", calories=450)
    service.create_food("user-2", name="Protein Shake", calories=160)

    assert [food.record.name for food in service.list_foods("user-1")] == [
        "Granola",
        "Protein Bar",
    ]
    assert [food.record.name for food in service.list_foods("user-1", "prot")] == [
        "Protein Bar"
    ]
    assert [food.record.name for food in service.list_foods("user-1", "ACME")] == [
        "Protein Bar"
    ]
    assert [food.record.name for food in service.list_foods("user-1", "custom")] == [
        "Granola"
    ]
