"""
Electro Approvals - Service.

Admin decisions on business accounts. Decisions are never applied locally:
the service validates, checks the transition against the last state it saw,
and returns whatever account the remote action hands back.
"""

import logging

from electro.exceptions import ExternalServiceException, NotFoundException, ValidationException
from electro.modules.accounts.repository import ProfilesRepository
from electro.modules.accounts.schemas import ApprovalState, BusinessAccount, parse_account
from electro.modules.approvals.admin_actions import AdminActionClient
from electro.modules.approvals.schemas import ApprovalEvent, ApprovalSummary
from electro.modules.approvals.state_machine import current_state, next_state, validate_rejection_reason

logger = logging.getLogger(__name__)


class ApprovalsService:
    """Service for business approval operations."""

    def __init__(
        self,
        repository: ProfilesRepository | None = None,
        admin_actions: AdminActionClient | None = None,
    ):
        self.repository = repository or ProfilesRepository()
        self.admin_actions = admin_actions or AdminActionClient()

    async def get_business_account(self, user_id: str) -> BusinessAccount:
        data = await self.repository.get(user_id)
        if not data:
            raise NotFoundException("account", user_id)
        account = parse_account(data)
        if not isinstance(account, BusinessAccount):
            raise ValidationException(f"Account {user_id} is not a business account")
        return account

    async def get_summary(self, user_id: str) -> ApprovalSummary:
        account = await self.get_business_account(user_id)
        return ApprovalSummary.from_account(account, current_state(account))

    async def list_pending(self) -> list[ApprovalSummary]:
        """Business accounts currently under review."""
        rows = await self.repository.list_by_approval_state(ApprovalState.UNDER_REVIEW)
        items = []
        for row in rows:
            account = parse_account(row)
            # Decided remotely after the stored state was written.
            if isinstance(account, BusinessAccount) and current_state(account) is ApprovalState.UNDER_REVIEW:
                items.append(ApprovalSummary.from_account(account, ApprovalState.UNDER_REVIEW))
        return items

    async def approve(self, user_id: str, access_token: str) -> BusinessAccount:
        account = await self.get_business_account(user_id)
        target = next_state(current_state(account), ApprovalEvent.APPROVE)

        data = await self.admin_actions.approve_business_account(user_id, access_token)
        logger.info("APPROVAL approve userId=%s -> ok", user_id)
        return self._parse_result(user_id, data, target)

    async def reject(self, user_id: str, reason: str | None, access_token: str) -> BusinessAccount:
        # Blank reasons fail before the profile read and the remote call.
        reason = validate_rejection_reason(reason)

        account = await self.get_business_account(user_id)
        target = next_state(current_state(account), ApprovalEvent.REJECT)

        data = await self.admin_actions.reject_business_account(user_id, reason, access_token)
        logger.info("APPROVAL reject userId=%s -> ok", user_id)
        return self._parse_result(user_id, data, target)

    def _parse_result(self, user_id: str, data: dict, expected: ApprovalState) -> BusinessAccount:
        """The remote account with its state reconciled against the decision fields."""
        account = parse_account({"id": user_id, **data})
        if not isinstance(account, BusinessAccount):
            raise ExternalServiceException("admin-actions", "returned a non-business account")

        state = current_state(account)
        if state is not expected:
            logger.warning(
                "APPROVAL userId=%s remote result in state=%s, expected %s", user_id, state.value, expected.value
            )
            raise ExternalServiceException("admin-actions", f"returned an account in state '{state.value}'")

        info = account.business_info.model_copy(update={"approval_state": state})
        return account.model_copy(update={"business_info": info})
