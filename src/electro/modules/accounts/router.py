"""
Electro Accounts - Router.

API endpoints for the caller's own profile.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from electro.auth import CurrentUser, get_current_user
from electro.auth.provider import lookup_identity
from electro.auth.schemas import SessionUser
from electro.deps import require_accounts
from electro.modules.accounts.schemas import DocumentCreateRequest
from electro.modules.accounts.service import AccountsService

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
    dependencies=[require_accounts],
)


def get_service() -> AccountsService:
    """Get accounts service instance."""
    return AccountsService()


def _identity(user: CurrentUser) -> SessionUser:
    return SessionUser(uid=user.uid, email=user.email, email_verified=user.email_verified)


@router.get("/me")
async def get_my_account(
    user: CurrentUser = Depends(get_current_user),
    service: AccountsService = Depends(get_service),
) -> dict[str, Any]:
    """The caller's profile, created on first access."""
    account = await service.ensure_account(_identity(user))
    return account.to_document()


@router.patch("/me")
async def update_my_account(
    updates: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
    service: AccountsService = Depends(get_service),
) -> dict[str, Any]:
    """Edit owner-editable fields. Roles, account type and approval fields are refused."""
    account = await service.update_profile(user.uid, updates)
    return account.to_document()


@router.post("/me/documents", status_code=201)
async def add_my_document(
    request: DocumentCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: AccountsService = Depends(get_service),
) -> dict[str, Any]:
    """Register an uploaded document on a business profile."""
    account = await service.add_document(user.uid, request)
    return account.to_document()


@router.post("/me/reconcile")
async def reconcile_my_account(
    user: CurrentUser = Depends(get_current_user),
    service: AccountsService = Depends(get_service),
) -> dict[str, Any]:
    """Pull the e-mail verification flag from the identity provider."""
    identity = lookup_identity(user.uid) or _identity(user)
    account = await service.ensure_account(identity)
    account = await service.reconcile_email_verification(account, identity.email_verified)
    return account.to_document()
