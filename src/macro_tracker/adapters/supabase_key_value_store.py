"""Supabase table used as a durable key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_tracker.services.cache import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Key-value store backed by a two-column Supabase table."""

    client: Client
    table_name: str = "key_value_store"

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key."""
        response = (
            self.client.table(self.table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table_name).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()

    def remove_item(self, key: str) -> None:
        """Delete a key."""
        self.client.table(self.table_name).delete().eq("key", key).execute()
