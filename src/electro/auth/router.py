"""Electro Auth Routes.

Thin HTTP surface over the auth action gateway. Every action answers with the
`OperationResult` shape; failed results carry a localized message and a
taxonomy code, and an HTTP status derived from that code.

Session-bound actions (logout, verification e-mail, password change) need the
caller's session: the access token comes from the `Authorization` header and
the refresh token from `X-Refresh-Token`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel

from electro.auth import CurrentUser, get_current_user
from electro.auth.context import build_snapshot
from electro.auth.gateway import AuthActionGateway
from electro.auth.messages import AuthErrorCode
from electro.auth.provider import SupabaseSessionProvider
from electro.auth.registration import get_pending_registration_store
from electro.auth.schemas import (
    FederatedLoginRequest,
    LoginRequest,
    PasswordChangeRequest,
    PasswordResetRequest,
    RegistrationData,
    SessionUser,
)
from electro.auth.tokens import security
from electro.config import Settings, get_settings
from electro.exceptions import ProviderError
from electro.modules.accounts.service import AccountsService
from electro.modules.settings.cache import SettingsCache, get_settings_cache
from electro.modules.settings.schemas import SettingsKey
from electro.schemas import OperationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_STATUS_BY_CODE: dict[str, int] = {
    AuthErrorCode.INVALID_CREDENTIALS.value: 401,
    AuthErrorCode.NOT_AUTHENTICATED.value: 401,
    AuthErrorCode.ACCOUNT_DISABLED.value: 403,
    AuthErrorCode.USER_NOT_FOUND.value: 404,
    AuthErrorCode.EMAIL_ALREADY_IN_USE.value: 409,
    AuthErrorCode.RATE_LIMITED.value: 429,
    AuthErrorCode.NETWORK_UNAVAILABLE.value: 503,
    AuthErrorCode.UNKNOWN.value: 502,
}


def _respond(result: OperationResult) -> Any:
    if result.success:
        return result
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(result.code or "", 400),
        content=result.model_dump(mode="json"),
    )


async def get_session_provider(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    x_refresh_token: Annotated[str | None, Header()] = None,
) -> SupabaseSessionProvider:
    """A provider bound to the caller's session when one was sent."""
    provider = SupabaseSessionProvider(site_url=settings.site_url)
    if credentials and x_refresh_token:
        try:
            await provider.restore(credentials.credentials, x_refresh_token)
        except ProviderError as e:
            # Session-bound actions then answer not-authenticated.
            logger.info("Could not restore caller session: %s", e)
    return provider


def get_gateway(
    provider: Annotated[SupabaseSessionProvider, Depends(get_session_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthActionGateway:
    return AuthActionGateway(provider, get_pending_registration_store(), settings.app_locale)


def get_accounts_service() -> AccountsService:
    return AccountsService()


# =============================================================================
# Actions
# =============================================================================


@router.post("/login")
async def login(payload: LoginRequest, gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.login(payload.email, payload.password))


@router.post("/register", status_code=201)
async def register(payload: RegistrationData, gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.register(payload))


@router.post("/logout")
async def logout(gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.logout())


@router.post("/federated")
async def federated_login(payload: FederatedLoginRequest, gateway: AuthActionGateway = Depends(get_gateway)):
    """Start an OAuth sign-in; `data` is the provider URL."""
    return _respond(await gateway.login_with_federated_provider(payload.provider, payload.redirect_to))


@router.post("/verification-email")
async def send_verification_email(gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.send_email_verification())


@router.post("/password-reset")
async def reset_password(payload: PasswordResetRequest, gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.reset_password(payload.email))


@router.post("/password-change")
async def change_password(payload: PasswordChangeRequest, gateway: AuthActionGateway = Depends(get_gateway)):
    return _respond(await gateway.change_password(payload.current_password, payload.new_password))


# =============================================================================
# Derived view
# =============================================================================


class AuthView(BaseModel):
    uid: str
    email: str | None = None
    is_admin: bool
    roles: list[str]
    is_profile_complete: bool
    has_documents: bool
    destination: str | None = None
    account: dict[str, Any] | None = None


async def _approval_required(cache: SettingsCache) -> bool:
    try:
        return bool(await cache.get_value(SettingsKey.BUSINESS_ACCOUNT_APPROVAL, True))
    except Exception as e:
        logger.warning("Could not read %s, assuming approval is required: %s", SettingsKey.BUSINESS_ACCOUNT_APPROVAL.value, e)
        return True


@router.get("/me", response_model=AuthView)
async def me(
    user: CurrentUser = Depends(get_current_user),
    accounts: AccountsService = Depends(get_accounts_service),
    settings_cache: SettingsCache = Depends(get_settings_cache),
):
    """Roles, completeness and next destination for the caller."""
    identity = SessionUser(uid=user.uid, email=user.email, email_verified=user.email_verified)
    account = await accounts.ensure_account(identity)
    account = await accounts.reconcile_email_verification(account, user.email_verified)

    snapshot = build_snapshot(identity, user.claims, account, await _approval_required(settings_cache))
    return AuthView(
        uid=user.uid,
        email=user.email,
        is_admin=snapshot.is_admin,
        roles=list(snapshot.roles),
        is_profile_complete=snapshot.is_profile_complete,
        has_documents=snapshot.has_documents,
        destination=snapshot.destination.value if snapshot.destination else None,
        account=account.to_document(),
    )
