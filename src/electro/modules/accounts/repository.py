"""
Electro Accounts - Repository.

Profile documents in Supabase, one row per account keyed by the auth user id.
"""

from typing import Any

from supabase import Client

from electro.config import get_settings
from electro.core.repository import BaseRepository
from electro.modules.accounts.schemas import ApprovalState


class ProfilesRepository(BaseRepository):
    """Repository for profile documents."""

    def __init__(self, client: Client | None = None, table_name: str | None = None):
        super().__init__(client)
        self._table_name = table_name or get_settings().supabase.profiles_table

    @property
    def table_name(self) -> str:
        return self._table_name

    async def list_by_approval_state(self, state: ApprovalState) -> list[dict[str, Any]]:
        """Business profiles currently in `state`, oldest submission first."""
        return await self.query(
            filters={
                "accountType": "business",
                "businessInfo->>approvalState": state.value,
            },
            order_by="updatedAt",
            descending=False,
        )
