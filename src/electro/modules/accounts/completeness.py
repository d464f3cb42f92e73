"""
Electro Accounts - Profile Completeness.

Pure derivations over a profile document. Callers use them to pick where a
user goes next (setup, pending approval, the product); nothing here navigates
or writes.
"""

from enum import Enum

from electro.modules.accounts.schemas import BusinessAccount, IndividualAccount


class Destination(str, Enum):
    SETUP = "setup"
    PENDING_APPROVAL = "pending_approval"
    HOME = "home"


def has_basic_info(account: IndividualAccount | BusinessAccount | None) -> bool:
    if account is None:
        return False
    return bool(account.first_name and account.last_name and account.email and account.is_email_verified)


def has_documents(account: IndividualAccount | BusinessAccount | None) -> bool:
    """Only business accounts carry documents."""
    return isinstance(account, BusinessAccount) and len(account.documents) > 0


def is_profile_complete(account: IndividualAccount | BusinessAccount | None) -> bool:
    if not has_basic_info(account):
        return False

    if isinstance(account, BusinessAccount):
        return bool(account.business_info.company_name) and has_documents(account)

    return True


def resolve_destination(
    account: IndividualAccount | BusinessAccount | None,
    require_approval: bool = True,
) -> Destination:
    """Where the user should land given their profile.

    `require_approval` mirrors the `businessAccountApproval` system setting.
    """
    if not is_profile_complete(account):
        return Destination.SETUP
    if require_approval and isinstance(account, BusinessAccount) and not account.business_info.is_approved:
        return Destination.PENDING_APPROVAL
    return Destination.HOME
