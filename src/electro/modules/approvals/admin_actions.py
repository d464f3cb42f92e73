"""
Electro Approvals - Admin Actions.

Client for the privileged Edge Functions that approve or reject a business
account. The caller's bearer token is forwarded as-is: the function checks the
admin claim server-side, so authorization failures come back from it and are
surfaced verbatim.

Response contract: `{"success": true, "data": <account>}` or
`{"success": false, "message": "..."}`.
"""

import logging
from typing import Any

import httpx

from electro.config import Settings, get_settings
from electro.exceptions import (
    ExternalServiceException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "admin-actions"


def _message(data: Any, default: str) -> str:
    if isinstance(data, dict):
        for key in ("message", "error", "msg"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return default


class AdminActionClient:
    """Calls the approve/reject Edge Functions over HTTP."""

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or get_settings()
        self._transport = transport

    def _url(self, function_name: str) -> str:
        return f"{self.settings.functions_url}/{function_name}"

    async def _post_json(self, function_name: str, payload: dict[str, Any], access_token: str) -> tuple[int, Any]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "apikey": self.settings.supabase.anon_key,
        }
        timeout = httpx.Timeout(self.settings.admin_actions.timeout_seconds)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                r = await client.post(self._url(function_name), json=payload, headers=headers)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.InvalidURL) as e:
            logger.warning("ADMIN_ACTION %s -> unreachable: %s", function_name, e)
            raise ExternalServiceException(SERVICE_NAME, "function unreachable", status_code=503) from e

        try:
            return r.status_code, r.json()
        except ValueError:
            return r.status_code, None

    async def _call(self, function_name: str, payload: dict[str, Any], access_token: str) -> dict[str, Any]:
        status_code, data = await self._post_json(function_name, payload, access_token)
        logger.info("ADMIN_ACTION %s userId=%s -> %s", function_name, payload.get("userId"), status_code)

        if status_code == 401:
            raise UnauthorizedException(_message(data, "Not authenticated"))
        if status_code == 403:
            raise ForbiddenException(_message(data, "Admin privileges required"), required_role="admin")
        if status_code == 404:
            raise NotFoundException("account", payload.get("userId", ""))
        if status_code >= 400:
            raise ExternalServiceException(SERVICE_NAME, _message(data, f"HTTP {status_code}"))

        if not isinstance(data, dict):
            raise ExternalServiceException(SERVICE_NAME, "malformed response")
        if not data.get("success"):
            raise ExternalServiceException(SERVICE_NAME, _message(data, f"{function_name} failed"))

        account = data.get("data")
        if not isinstance(account, dict):
            raise ExternalServiceException(SERVICE_NAME, "response carries no account")
        return account

    async def approve_business_account(self, user_id: str, access_token: str) -> dict[str, Any]:
        """Approve; returns the updated account document."""
        return await self._call(
            self.settings.admin_actions.approve_function,
            {"userId": user_id},
            access_token,
        )

    async def reject_business_account(self, user_id: str, reason: str, access_token: str) -> dict[str, Any]:
        """Reject with `reason`; returns the updated account document."""
        return await self._call(
            self.settings.admin_actions.reject_function,
            {"userId": user_id, "reason": reason},
            access_token,
        )
