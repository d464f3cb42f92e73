"""
Electro Settings - Repository.
"""

from datetime import datetime, timezone
from typing import Any

from supabase import Client

from electro.config import get_settings
from electro.core.repository import BaseRepository
from electro.modules.settings.schemas import SettingFilter, SettingsKey


class SettingsRepository(BaseRepository):
    """Settings table, keyed by setting name."""

    def __init__(self, client: Client | None = None, table_name: str | None = None):
        super().__init__(client)
        self._table_name = table_name or get_settings().supabase.settings_table

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def key_column(self) -> str:
        return "key"

    async def list(self, filter: SettingFilter) -> list[dict[str, Any]]:
        return await self.query(filters=filter.as_query(), order_by="key", descending=False)

    async def write(self, key: SettingsKey, value: Any, actor: str | None = None) -> dict[str, Any]:
        """Update the value, creating the document on first write."""
        now = datetime.now(timezone.utc).isoformat()
        existing = await self.get(key.value)
        if existing:
            return await self.update(
                key.value,
                {"value": value, "isActive": True, "isDeleted": False, "updatedAt": now, "updatedBy": actor},
            )
        return await self.set(
            key.value,
            {
                "value": value,
                "isActive": True,
                "isDeleted": False,
                "createdAt": now,
                "updatedAt": now,
                "updatedBy": actor,
            },
        )

    async def soft_delete(self, key: SettingsKey, actor: str | None = None) -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return await self.update(
            key.value,
            {"isDeleted": True, "isActive": False, "updatedAt": now, "updatedBy": actor},
        )
