"""
Electro Admin - Role Administration.

Roles are written to the user's `app_metadata` with the Supabase admin API,
which is where access-token claims come from. The `admin` flag in the same
object is never touched here, and "admin" is not accepted as a role name.
The profile's `rolesList` is then synced as a best-effort copy.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel
from supabase import Client
from supabase_auth.errors import AuthError

from electro.auth.roles import ADMIN_ROLE, merge_roles
from electro.core.supabase_client import get_supabase_client
from electro.exceptions import ExternalServiceException, NotFoundException, ValidationException
from electro.modules.accounts.repository import ProfilesRepository

logger = logging.getLogger(__name__)


class RoleAssignment(BaseModel):
    user_id: str
    roles: list[str]
    is_admin: bool
    profile_synced: bool


def _check_role_names(roles: list[str]) -> None:
    invalid = [role for role in roles if not role or not role.strip()]
    if invalid:
        raise ValidationException("Role names must not be empty")
    if any(role.lower() == ADMIN_ROLE for role in roles):
        raise ValidationException(
            "Admin status is granted through the admin claim, not as a role",
            errors=[{"field": "roles", "message": "'admin' is not an assignable role"}],
        )


class RoleAdminService:
    """Set, add and remove roles of a user."""

    def __init__(self, client: Client | None = None, profiles: ProfilesRepository | None = None):
        self._client = client or get_supabase_client()
        self.profiles = profiles or ProfilesRepository(self._client)

    def _app_metadata(self, user_id: str) -> dict[str, Any]:
        try:
            response = self._client.auth.admin.get_user_by_id(user_id)
        except (AuthError, httpx.HTTPError) as e:
            if getattr(e, "status", None) == 404:
                raise NotFoundException("user", user_id) from e
            raise ExternalServiceException("supabase-auth", str(e)) from e
        user = getattr(response, "user", None)
        if user is None:
            raise NotFoundException("user", user_id)
        return dict(getattr(user, "app_metadata", None) or {})

    async def get_roles(self, user_id: str) -> tuple[list[str], bool]:
        metadata = self._app_metadata(user_id)
        roles = metadata.get("roles")
        if isinstance(roles, str):
            roles = [roles]
        return list(merge_roles([r for r in roles or [] if isinstance(r, str)])), metadata.get("admin") is True

    async def _write(self, user_id: str, roles: list[str]) -> RoleAssignment:
        metadata = self._app_metadata(user_id)
        merged = list(merge_roles(roles))
        metadata["roles"] = merged

        try:
            self._client.auth.admin.update_user_by_id(user_id, {"app_metadata": metadata})
        except (AuthError, httpx.HTTPError) as e:
            raise ExternalServiceException("supabase-auth", str(e)) from e
        logger.info("ROLES_SET uid=%s roles=%s", user_id, merged)

        synced = True
        try:
            await self.profiles.update(user_id, {"rolesList": merged})
        except Exception as e:
            # Claims are authoritative; the profile copy catches up on the next write.
            synced = False
            logger.warning("ROLES_PROFILE_SYNC uid=%s failed: %s", user_id, e)

        return RoleAssignment(
            user_id=user_id,
            roles=merged,
            is_admin=metadata.get("admin") is True,
            profile_synced=synced,
        )

    async def set_roles(self, user_id: str, roles: list[str]) -> RoleAssignment:
        _check_role_names(roles)
        return await self._write(user_id, roles)

    async def add_role(self, user_id: str, role: str) -> RoleAssignment:
        _check_role_names([role])
        current, _ = await self.get_roles(user_id)
        return await self._write(user_id, [*current, role])

    async def remove_role(self, user_id: str, role: str) -> RoleAssignment:
        current, _ = await self.get_roles(user_id)
        return await self._write(user_id, [r for r in current if r.lower() != role.lower()])
