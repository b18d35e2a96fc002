"""Supabase repository for logged meals."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.domain.nutrition import MacroProfile, MealEntry
from macro_tracker.services.meals import MealLogRepository


@dataclass
class SupabaseMealRepository(MealLogRepository):
    """Supabase implementation for meals."""

    client: Client

    def add_meal(self, entry: MealEntry) -> MealEntry:
        """Insert a meal row and return the entry with its id."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": entry.user_id,
                    "name": entry.name,
                    "brand_name": entry.brand or "",
                    "calories": entry.macros.calories,
                    "protein": entry.macros.protein,
                    "fats": entry.macros.fat,
                    "carbs": entry.macros.carbs,
                    "serving": entry.serving,
                    "image_url": entry.image_url,
                    "logged_at": entry.logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return replace(entry, id=str(response.data[0]["id"]))

    def list_meals(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[MealEntry]:
        """Return meals logged in the time range."""
        response = (
            self.client.table("meals")
            .select(
                "id, user_id, name, brand_name, calories, protein, fats, carbs, "
                "serving, image_url, logged_at"
            )
            .eq("user_id", user_id)
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def update_meal(
        self, user_id: str, meal_id: str, macros: MacroProfile, serving: str
    ) -> MealEntry | None:
        """Update a meal's macros and serving, scoped to its owner."""
        response = (
            self.client.table("meals")
            .update(
                {
                    "calories": macros.calories,
                    "protein": macros.protein,
                    "fats": macros.fat,
                    "carbs": macros.carbs,
                    "serving": serving,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", meal_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        """Delete a meal owned by the user."""
        response = (
            self.client.table("meals")
            .delete()
            .eq("id", meal_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(response.data)


def _parse_row(row: dict[str, object]) -> MealEntry:
    brand = row.get("brand_name")
    image_url = row.get("image_url")
    return MealEntry(
        id=str(row["id"]) if row.get("id") is not None else None,
        user_id=str(row["user_id"]),
        name=str(row.get("name", "")),
        brand=brand if isinstance(brand, str) and brand else None,
        macros=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein=float(row.get("protein") or 0.0),
            fat=float(row.get("fats") or 0.0),
            carbs=float(row.get("carbs") or 0.0),
        ),
        serving=str(row.get("serving", "")),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        image_url=image_url if isinstance(image_url, str) else None,
    )
