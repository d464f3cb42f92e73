"""
Electro Core - Base Repository.

Abstract base class for keyed document collections stored in Supabase tables.
"""

from abc import ABC, abstractmethod
from typing import Any

from supabase import Client

from electro.core.supabase_client import get_supabase_client
from electro.exceptions import NotFoundException


class BaseRepository(ABC):
    """
    Abstract base repository for keyed document access.

    Each row is one document addressed by `key_column`. Documents are plain
    dicts with camelCase keys; typing happens in the services.
    """

    def __init__(self, client: Client | None = None):
        """Initialize repository with optional Supabase client."""
        self._client = client or get_supabase_client()

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table name for this repository."""
        ...

    @property
    def key_column(self) -> str:
        """Column holding the document key."""
        return "id"

    @property
    def table(self):
        """Get the Supabase table reference."""
        return self._client.table(self.table_name)

    async def get(self, key: str) -> dict[str, Any] | None:
        """
        Get a single document by key.

        Returns:
            The document if found, None otherwise
        """
        response = self.table.select("*").eq(self.key_column, key).maybe_single().execute()
        # supabase-py returns None instead of an empty response for zero rows
        if response is None:
            return None
        return response.data

    async def get_or_raise(self, key: str) -> dict[str, Any]:
        """
        Get a single document by key, raise if not found.

        Raises:
            NotFoundException: If document not found
        """
        result = await self.get(key)
        if not result:
            raise NotFoundException(self.table_name, key)
        return result

    async def set(self, key: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create or fully replace the document stored under `key`."""
        payload = {**data, self.key_column: key}
        response = self.table.upsert(payload, on_conflict=self.key_column).execute()
        return response.data[0] if response.data else payload

    async def update(self, key: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update top-level fields of an existing document.

        Raises:
            NotFoundException: If no document exists under `key`
        """
        response = self.table.update(data).eq(self.key_column, key).execute()
        if not response.data:
            raise NotFoundException(self.table_name, key)
        return response.data[0]

    async def query(
        self,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """
        List documents matching equality filters.

        Args:
            filters: Column -> value equality constraints; None values are skipped
            order_by: Optional column to sort by
        """
        query = self.table.select("*")

        for column, value in (filters or {}).items():
            if value is None:
                continue
            query = query.eq(column, value)

        if order_by:
            query = query.order(order_by, desc=descending)

        response = query.execute()
        return response.data or []
