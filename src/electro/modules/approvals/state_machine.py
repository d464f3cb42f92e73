"""
Electro Approvals - State Machine.

Business approval lifecycle:

    CREATED --company info--> DOCUMENTS_PENDING --complete--> UNDER_REVIEW
    UNDER_REVIEW --approve--> APPROVED
    UNDER_REVIEW --reject(reason)--> REJECTED --resubmit--> DOCUMENTS_PENDING

APPROVED is terminal. Functions here are pure: they return new account
models and never touch a store.
"""

from datetime import datetime, timezone

from electro.exceptions import ConflictException, ValidationException
from electro.modules.accounts.completeness import has_documents, is_profile_complete
from electro.modules.accounts.schemas import (
    ApprovalState,
    BusinessAccount,
    BusinessInfo,
    Document,
)
from electro.modules.approvals.schemas import ApprovalEvent

TRANSITIONS: dict[tuple[ApprovalState, ApprovalEvent], ApprovalState] = {
    (ApprovalState.CREATED, ApprovalEvent.COMPANY_INFO_SAVED): ApprovalState.DOCUMENTS_PENDING,
    (ApprovalState.DOCUMENTS_PENDING, ApprovalEvent.COMPANY_INFO_SAVED): ApprovalState.DOCUMENTS_PENDING,
    (ApprovalState.CREATED, ApprovalEvent.SUBMISSION_COMPLETED): ApprovalState.UNDER_REVIEW,
    (ApprovalState.DOCUMENTS_PENDING, ApprovalEvent.SUBMISSION_COMPLETED): ApprovalState.UNDER_REVIEW,
    (ApprovalState.UNDER_REVIEW, ApprovalEvent.APPROVE): ApprovalState.APPROVED,
    (ApprovalState.UNDER_REVIEW, ApprovalEvent.REJECT): ApprovalState.REJECTED,
    (ApprovalState.REJECTED, ApprovalEvent.RESUBMIT): ApprovalState.DOCUMENTS_PENDING,
}


def can_transition(state: ApprovalState, event: ApprovalEvent) -> bool:
    return (state, event) in TRANSITIONS


def next_state(state: ApprovalState, event: ApprovalEvent) -> ApprovalState:
    """Target state for `event`, or ConflictException if undefined."""
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise ConflictException(
            f"Cannot apply '{event.value}' to a business account in state '{state.value}'",
            current_state=state.value,
            target_state=event.value,
        ) from None


def _rejection_is_current(info: BusinessInfo) -> bool:
    if info.rejected_at is None:
        return False
    uploaded = info.documents_uploaded_at
    return uploaded is None or info.rejected_at >= uploaded


def infer_state(account: BusinessAccount) -> ApprovalState:
    """Derive the state of a profile written before the state was stored."""
    info = account.business_info
    if info.is_approved:
        return ApprovalState.APPROVED
    if _rejection_is_current(info):
        return ApprovalState.REJECTED
    if is_profile_complete(account):
        return ApprovalState.UNDER_REVIEW
    if info.company_name:
        return ApprovalState.DOCUMENTS_PENDING
    return ApprovalState.CREATED


def current_state(account: BusinessAccount) -> ApprovalState:
    """Stored state, overridden by decision fields written without it.

    Admin actions record `isApproved` and the rejection stamps; a stored
    state that predates such a decision is superseded by it.
    """
    info = account.business_info
    if info.approval_state is None:
        return infer_state(account)
    if info.is_approved:
        return ApprovalState.APPROVED
    if info.approval_state is not ApprovalState.APPROVED and _rejection_is_current(info):
        return ApprovalState.REJECTED
    return info.approval_state


def validate_rejection_reason(reason: str | None) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationException(
            "A rejection reason is required",
            errors=[{"field": "reason", "message": "must not be empty"}],
        )
    return cleaned


def apply_event(
    account: BusinessAccount,
    event: ApprovalEvent,
    actor: str | None = None,
    reason: str | None = None,
    now: datetime | None = None,
) -> BusinessAccount:
    """Return a copy of `account` with `event` applied to its business info."""
    if event is ApprovalEvent.REJECT:
        reason = validate_rejection_reason(reason)

    state = next_state(current_state(account), event)
    now = now or datetime.now(timezone.utc)

    changes: dict = {"approval_state": state}
    if event is ApprovalEvent.SUBMISSION_COMPLETED:
        changes["documents_uploaded_at"] = now
    elif event is ApprovalEvent.APPROVE:
        changes.update(
            is_approved=True,
            approved_at=now,
            approved_by=actor,
            rejection_reason=None,
            rejected_at=None,
            rejected_by=None,
        )
    elif event is ApprovalEvent.REJECT:
        changes.update(
            is_approved=False,
            rejection_reason=reason,
            rejected_at=now,
            rejected_by=actor,
            approved_at=None,
            approved_by=None,
        )
    elif event is ApprovalEvent.RESUBMIT:
        changes.update(rejection_reason=None, rejected_at=None, rejected_by=None)

    info = account.business_info.model_copy(update=changes)
    return account.model_copy(update={"business_info": info, "updated_at": now})


def advance(account: BusinessAccount, now: datetime | None = None) -> BusinessAccount:
    """Fire the implicit transitions the current profile content allows.

    Saving company info moves CREATED forward; a complete profile (basic info,
    company name, at least one document) moves the account under review.
    """
    state = current_state(account)
    if account.business_info.approval_state is not state:
        account = account.model_copy(
            update={"business_info": account.business_info.model_copy(update={"approval_state": state})}
        )

    if current_state(account) is ApprovalState.CREATED and account.business_info.company_name:
        account = apply_event(account, ApprovalEvent.COMPANY_INFO_SAVED, now=now)

    if current_state(account) is ApprovalState.DOCUMENTS_PENDING and is_profile_complete(account):
        account = apply_event(account, ApprovalEvent.SUBMISSION_COMPLETED, now=now)

    return account


def add_document(account: BusinessAccount, document: Document, now: datetime | None = None) -> BusinessAccount:
    """Append a document; a rejected account is resubmitted first."""
    now = now or datetime.now(timezone.utc)
    if current_state(account) is ApprovalState.REJECTED:
        account = apply_event(account, ApprovalEvent.RESUBMIT, now=now)
    elif current_state(account) is ApprovalState.APPROVED:
        raise ConflictException(
            "Documents of an approved business account cannot be changed",
            current_state=ApprovalState.APPROVED.value,
        )

    if document.uploaded_at is None:
        document = document.model_copy(update={"uploaded_at": now})
    account = account.model_copy(update={"documents": [*account.documents, document]})
    return advance(account, now=now)


def is_awaiting_review(account: BusinessAccount) -> bool:
    return current_state(account) is ApprovalState.UNDER_REVIEW and has_documents(account)
