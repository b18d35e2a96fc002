"""Supabase repository for user-created foods."""

from dataclasses import dataclass, replace
from datetime import datetime

from supabase import Client

from macro_tracker.domain.nutrition import CustomFood, MacroProfile, NutritionRecord
from macro_tracker.services.custom_foods import CustomFoodRepository

_COLUMNS = (
    "id, user_id, name, brand, description, serving_size, serving_unit, "
    "calories, protein, carbs, fat, base_grams, image_url, created_at"
)


@dataclass
class SupabaseCustomFoodRepository(CustomFoodRepository):
    """Supabase implementation for custom foods."""

    client: Client

    def add_custom_food(self, food: CustomFood) -> CustomFood:
        """Insert a custom food row and return it with its id."""
        record = food.record
        response = (
            self.client.table("custom_foods")
            .insert(
                {
                    "user_id": food.user_id,
                    "name": record.name,
                    "brand": record.brand,
                    "description": food.description,
                    "serving_size": record.serving_qty,
                    "serving_unit": record.serving_unit,
                    "calories": record.macros.calories,
                    "protein": record.macros.protein,
                    "carbs": record.macros.carbs,
                    "fat": record.macros.fat,
                    "base_grams": record.base_grams,
                    "image_url": record.image_url,
                    "created_at": (
                        food.created_at.isoformat() if food.created_at else None
                    ),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create custom food")
        return replace(food, id=str(response.data[0]["id"]))

    def list_custom_foods(self, user_id: str) -> list[CustomFood]:
        """Return the user's custom foods, newest first."""
        response = (
            self.client.table("custom_foods")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> CustomFood:
    created_at = row.get("created_at")
    image_url = row.get("image_url")
    brand = row.get("brand")
    return CustomFood(
        id=str(row["id"]) if row.get("id") is not None else None,
        user_id=str(row["user_id"]),
        description=str(row.get("description") or ""),
        created_at=(
            datetime.fromisoformat(created_at) if isinstance(created_at, str) else None
        ),
        record=NutritionRecord(
            name=str(row.get("name", "")),
            brand=brand if isinstance(brand, str) and brand else None,
            macros=MacroProfile(
                calories=float(row.get("calories") or 0.0),
                protein=float(row.get("protein") or 0.0),
                fat=float(row.get("fat") or 0.0),
                carbs=float(row.get("carbs") or 0.0),
            ),
            serving_qty=float(row.get("serving_size") or 100.0),
            serving_unit=str(row.get("serving_unit") or "g"),
            base_grams=float(row.get("base_grams") or 100.0),
            image_url=image_url if isinstance(image_url, str) else None,
            source="Custom",
        ),
    )
