"""
Electro Approvals - Router.

API endpoints for business account approval. Approve and reject are not
guarded locally: the remote admin action checks the caller's admin claim and
its refusal is returned as-is.
"""

from typing import Any

from fastapi import APIRouter, Depends

from electro.auth import CurrentUser, get_current_user
from electro.deps import require_admin, require_approvals
from electro.modules.approvals.schemas import ApprovalListResponse, ApprovalSummary, RejectRequest
from electro.modules.approvals.service import ApprovalsService

router = APIRouter(
    prefix="/approvals",
    tags=["approvals"],
    dependencies=[require_approvals],
)


def get_service() -> ApprovalsService:
    """Get approvals service instance."""
    return ApprovalsService()


@router.get("/pending", response_model=ApprovalListResponse, dependencies=[require_admin])
async def list_pending_approvals(service: ApprovalsService = Depends(get_service)):
    """Business accounts under review."""
    items = await service.list_pending()
    return ApprovalListResponse(items=items, total_count=len(items))


@router.get("/{user_id}", response_model=ApprovalSummary, dependencies=[require_admin])
async def get_approval(user_id: str, service: ApprovalsService = Depends(get_service)):
    return await service.get_summary(user_id)


@router.post("/{user_id}/approve")
async def approve_business(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalsService = Depends(get_service),
) -> dict[str, Any]:
    account = await service.approve(user_id, user.access_token)
    return account.to_document()


@router.post("/{user_id}/reject")
async def reject_business(
    user_id: str,
    request: RejectRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalsService = Depends(get_service),
) -> dict[str, Any]:
    """Reject with a reason. Blank reasons fail with 400 before the remote call."""
    account = await service.reject(user_id, request.reason, user.access_token)
    return account.to_document()
