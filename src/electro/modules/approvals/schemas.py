"""
Electro Approvals - Schemas.

Pydantic models for business account approval.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from electro.modules.accounts.schemas import ApprovalState, BusinessAccount


class ApprovalEvent(str, Enum):
    COMPANY_INFO_SAVED = "company_info_saved"
    SUBMISSION_COMPLETED = "submission_completed"
    APPROVE = "approve"
    REJECT = "reject"
    RESUBMIT = "resubmit"


# =============================================================================
# Request Schemas
# =============================================================================


class RejectRequest(BaseModel):
    """Request to reject a business account.

    Blank reasons are rejected by the service, not here, so the error carries
    the same code whether it comes from HTTP or from a direct call.
    """

    reason: str = Field(default="", max_length=1000)


# =============================================================================
# Response Schemas
# =============================================================================


class ApprovalSummary(BaseModel):
    """Admin-facing view of one business account's approval."""

    user_id: str
    email: str | None = None
    display_name: str | None = None
    company_name: str | None = None
    tax_number: str | None = None
    state: ApprovalState
    document_count: int = 0
    documents_uploaded_at: datetime | None = None
    rejection_reason: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None

    @classmethod
    def from_account(cls, account: BusinessAccount, state: ApprovalState) -> "ApprovalSummary":
        info = account.business_info
        return cls(
            user_id=account.id,
            email=account.email,
            display_name=account.display_name,
            company_name=info.company_name,
            tax_number=info.tax_number,
            state=state,
            document_count=len(account.documents),
            documents_uploaded_at=info.documents_uploaded_at,
            rejection_reason=info.rejection_reason,
            approved_at=info.approved_at,
            rejected_at=info.rejected_at,
        )


class ApprovalListResponse(BaseModel):
    """Accounts waiting for a decision."""

    items: list[ApprovalSummary]
    total_count: int
