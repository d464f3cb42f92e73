"""
Electro Accounts - Service.

Profile documents: creation on first sign-in, owner edits, document uploads
and the e-mail verification sync with the identity provider.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from electro.auth.registration import PendingRegistrationStore, get_pending_registration_store
from electro.auth.schemas import AccountType, RegistrationIntent, SessionUser
from electro.exceptions import ElectroException, NotFoundException, ValidationException
from electro.modules.accounts.repository import ProfilesRepository
from electro.modules.accounts.schemas import (
    FORBIDDEN_BUSINESS_FIELDS,
    FORBIDDEN_PROFILE_FIELDS,
    BusinessAccount,
    BusinessInfo,
    BusinessInfoUpdate,
    Document,
    DocumentCreateRequest,
    IndividualAccount,
    ProfileUpdate,
    file_type_from_mime,
    parse_account,
)
from electro.modules.approvals import state_machine

logger = logging.getLogger(__name__)

AnyAccount = IndividualAccount | BusinessAccount


def split_display_name(display_name: str | None) -> tuple[str, str]:
    """'Ada Lovelace King' -> ('Ada', 'Lovelace King')."""
    parts = (display_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def check_update_fields(updates: dict[str, Any]) -> None:
    """Reject owner writes to privileged fields before anything is read."""
    errors = [
        {"field": key, "message": "cannot be changed by the account owner"}
        for key in updates
        if key in FORBIDDEN_PROFILE_FIELDS
    ]

    business = updates.get("businessInfo")
    if business is not None:
        if not isinstance(business, dict):
            errors.append({"field": "businessInfo", "message": "must be an object"})
        else:
            errors.extend(
                {"field": f"businessInfo.{key}", "message": "is managed by the approval workflow"}
                for key in business
                if key in FORBIDDEN_BUSINESS_FIELDS
            )

    if errors:
        raise ValidationException("Profile update contains protected fields", errors=errors)


class AccountsService:
    """Service for profile operations."""

    def __init__(
        self,
        repository: ProfilesRepository | None = None,
        registrations: PendingRegistrationStore | None = None,
    ):
        self.repository = repository or ProfilesRepository()
        self.registrations = registrations or get_pending_registration_store()

    async def find_account(self, user_id: str) -> AnyAccount | None:
        data = await self.repository.get(user_id)
        if not data:
            return None
        try:
            return parse_account({"id": user_id, **data})
        except ValidationError as e:
            logger.error("Profile document %s is malformed: %s", user_id, e)
            raise ElectroException(
                code="PROFILE_INVALID",
                message=f"Profile document {user_id} is malformed",
                status_code=500,
            ) from e

    async def get_account(self, user_id: str) -> AnyAccount:
        account = await self.find_account(user_id)
        if account is None:
            raise NotFoundException("account", user_id)
        return account

    async def _save(self, account: AnyAccount) -> AnyAccount:
        await self.repository.set(account.id, account.to_document(exclude={"id"}))
        return account

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def _new_account(self, identity: SessionUser, intent: RegistrationIntent | None, now: datetime) -> AnyAccount:
        if intent is not None:
            first_name, last_name = intent.first_name, intent.last_name
            display_name = intent.display_name or identity.display_name
            phone = intent.phone or identity.phone
            account_type = intent.account_type
        else:
            first_name, last_name = split_display_name(identity.display_name)
            display_name = identity.display_name
            phone = identity.phone
            account_type = AccountType.INDIVIDUAL

        common = dict(
            id=identity.uid,
            email=identity.email or (intent.email if intent else ""),
            first_name=first_name,
            last_name=last_name,
            display_name=display_name,
            phone=phone,
            photo_url=identity.photo_url,
            is_email_verified=identity.email_verified,
            roles_list=["user"],
            created_at=now,
            updated_at=now,
        )

        if account_type is AccountType.BUSINESS:
            info = BusinessInfo(
                company_name=intent.company_name if intent else None,
                tax_number=intent.tax_number if intent else None,
                business_address=intent.business_address if intent else None,
                business_phone=intent.business_phone if intent else None,
            )
            return state_machine.advance(BusinessAccount(**common, business_info=info), now=now)

        return IndividualAccount(**common)

    async def ensure_account(self, identity: SessionUser) -> AnyAccount:
        """Return the caller's profile, creating it on first sign-in.

        A staged registration intent (account type, business fields) is used
        when present; otherwise the profile is built from the identity alone.
        """
        existing = await self.find_account(identity.uid)
        if existing is not None:
            return existing

        intent = await self.registrations.consume(identity.email) if identity.email else None
        account = self._new_account(identity, intent, datetime.now(timezone.utc))
        await self._save(account)
        logger.info(
            "ACCOUNT_CREATED uid=%s type=%s from_intent=%s",
            account.id,
            account.account_type,
            intent is not None,
        )
        return account

    # -------------------------------------------------------------------------
    # Owner edits
    # -------------------------------------------------------------------------

    async def update_profile(self, user_id: str, updates: dict[str, Any]) -> AnyAccount:
        check_update_fields(updates)

        business_updates = updates.get("businessInfo")
        try:
            profile = ProfileUpdate.model_validate({k: v for k, v in updates.items() if k != "businessInfo"})
            business = BusinessInfoUpdate.model_validate(business_updates) if business_updates else None
        except ValidationError as e:
            raise ValidationException(
                "Invalid profile update",
                errors=[{"field": ".".join(map(str, err["loc"])), "message": err["msg"]} for err in e.errors()],
            ) from e

        account = await self.get_account(user_id)
        now = datetime.now(timezone.utc)

        account = account.model_copy(update={**profile.model_dump(exclude_unset=True), "updated_at": now})

        if business is not None:
            if not isinstance(account, BusinessAccount):
                raise ValidationException("Only business accounts have business information")
            info = account.business_info.model_copy(update=business.model_dump(exclude_unset=True))
            account = account.model_copy(update={"business_info": info})

        if isinstance(account, BusinessAccount):
            account = state_machine.advance(account, now=now)

        return await self._save(account)

    async def add_document(self, user_id: str, request: DocumentCreateRequest) -> BusinessAccount:
        """Attach an uploaded document; may move the account under review."""
        account = await self.get_account(user_id)
        if not isinstance(account, BusinessAccount):
            raise ValidationException("Only business accounts upload documents")

        now = datetime.now(timezone.utc)
        document = Document(
            category=request.category,
            storage_path=request.storage_path,
            url=request.url,
            file_type=file_type_from_mime(request.mime_type),
            name=request.name,
            uploaded_at=now,
        )
        before = state_machine.current_state(account)
        account = state_machine.add_document(account, document, now=now)
        account = account.model_copy(update={"updated_at": now})
        await self._save(account)

        after = state_machine.current_state(account)
        if after is not before:
            logger.info("APPROVAL_STATE uid=%s %s -> %s", user_id, before.value, after.value)
        return account

    # -------------------------------------------------------------------------
    # Consistency with the identity provider
    # -------------------------------------------------------------------------

    async def reconcile_email_verification(self, account: AnyAccount, provider_verified: bool) -> AnyAccount:
        """Copy a verified e-mail flag from the provider onto the profile.

        One-way: a verified profile is never downgraded. The write is best
        effort; on failure the provider value is still returned so the current
        request sees the verified state.
        """
        if not provider_verified or account.is_email_verified:
            return account

        now = datetime.now(timezone.utc)
        synced = account.model_copy(update={"is_email_verified": True, "updated_at": now})
        if isinstance(synced, BusinessAccount):
            synced = state_machine.advance(synced, now=now)

        try:
            await self._save(synced)
        except Exception as e:
            logger.warning("EMAIL_VERIFICATION_SYNC uid=%s failed: %s", account.id, e)
        else:
            logger.info("EMAIL_VERIFICATION_SYNC uid=%s -> verified", account.id)
        return synced
