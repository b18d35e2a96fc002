"""Supabase repository for logged weights."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from macro_tracker.domain.goals import WeightEntry
from macro_tracker.services.goals import WeightLogRepository


@dataclass
class SupabaseWeightRepository(WeightLogRepository):
    """Supabase implementation for the weight log."""

    client: Client

    def add_weight_entry(
        self, user_id: str, weight_kg: float, logged_at: datetime
    ) -> WeightEntry:
        """Insert a weight row and return it."""
        response = (
            self.client.table("weights")
            .insert(
                {
                    "user_id": user_id,
                    "weight_kg": weight_kg,
                    "logged_at": logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create weight entry")
        return _parse_row(response.data[0])

    def list_weight_entries(self, user_id: str, limit: int) -> list[WeightEntry]:
        """Return the latest weight rows for a user."""
        response = (
            self.client.table("weights")
            .select("user_id, weight_kg, logged_at")
            .eq("user_id", user_id)
            .order("logged_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_weight_entries_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[WeightEntry]:
        """Return weight rows logged in the time range, oldest first."""
        response = (
            self.client.table("weights")
            .select("user_id, weight_kg, logged_at")
            .eq("user_id", user_id)
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> WeightEntry:
    return WeightEntry(
        user_id=str(row["user_id"]),
        weight_kg=float(row["weight_kg"]),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
    )
