"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.services.goals import ProfileRepository

_PROFILE_COLUMNS = {
    "age": "age",
    "weight": "weight_kg",
    "height": "height_cm",
    "gender": "gender",
    "activityLevel": "activity_level",
    "goal": "goal",
    "calorieGoal": "calorie_goal",
    "protein": "protein_g",
    "fats": "fats_g",
    "carbs": "carbs_g",
}
_FIELDS_BY_COLUMN = {column: name for name, column in _PROFILE_COLUMNS.items()}


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the profile fields for a user, if the row exists."""
        response = (
            self.client.table("profiles")
            .select(", ".join(_PROFILE_COLUMNS.values()))
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return {
            _FIELDS_BY_COLUMN[column]: value
            for column, value in row.items()
            if column in _FIELDS_BY_COLUMN and value is not None
        }

    def update_profile(self, user_id: str, changes: dict[str, object]) -> None:
        """Merge known fields into the profile row."""
        payload: dict[str, object] = {
            _PROFILE_COLUMNS[name]: value
            for name, value in changes.items()
            if name in _PROFILE_COLUMNS
        }
        if not payload:
            return
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.client.table("profiles").update(payload).eq("user_id", user_id).execute()
