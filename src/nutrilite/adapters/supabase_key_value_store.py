"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrilite.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores values as UTF-8 text rows in a `kv_store` table."""

    client: Client
    table_name: str = "kv_store"

    def get(self, key: str) -> bytes | None:
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
        value = response.data[0].get("value")
        if value is None:
            return None
        return str(value).encode("utf-8")

    def set(self, key: str, value: bytes) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table_name).upsert(
            {
                "key": key,
                "value": value.decode("utf-8"),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()

    def delete(self, key: str) -> None:
        """Remove a key."""
        self.client.table(self.table_name).delete().eq("key", key).execute()
