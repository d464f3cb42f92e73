"""
Electro Accounts - Schemas.

Profile documents as a tagged union on `accountType`: business-only fields
exist only on `BusinessAccount`.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter

from electro.schemas import CamelModel, TimestampMixin


class ApprovalState(str, Enum):
    """Lifecycle of a business account's approval."""

    CREATED = "created"
    DOCUMENTS_PENDING = "documents_pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentCategory(str, Enum):
    BUSINESS_LICENSE = "business_license"
    TAX_CERTIFICATE = "tax_certificate"
    ARTICLES_OF_INCORPORATION = "articles_of_incorporation"
    UTILITY_BILL = "utility_bill"
    ELECTRICIAN_CERTIFICATE = "electrician_certificate"
    OTHER = "other"


FileType = Literal["pdf", "image", "other"]


def file_type_from_mime(mime_type: str | None) -> FileType:
    mime = (mime_type or "").lower()
    if mime == "application/pdf":
        return "pdf"
    if mime.startswith("image/"):
        return "image"
    return "other"


class Document(CamelModel):
    """Uploaded document descriptor. The file itself lives in storage."""

    category: DocumentCategory = DocumentCategory.OTHER
    storage_path: str
    url: str | None = None
    file_type: FileType = "other"
    name: str | None = None
    uploaded_at: datetime | None = None


class BusinessInfo(CamelModel):
    company_name: str | None = None
    tax_number: str | None = None
    business_address: str | None = None
    business_phone: str | None = None

    approval_state: ApprovalState | None = None
    is_approved: bool = False
    is_certified: bool = False
    documents_uploaded_at: datetime | None = None
    rejection_reason: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    approved_by: str | None = None
    rejected_by: str | None = None


class AccountBase(TimestampMixin):
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    display_name: str | None = None
    phone: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    is_email_verified: bool = False
    roles_list: list[str] = Field(default_factory=list)


class IndividualAccount(AccountBase):
    account_type: Literal["individual"] = "individual"


class BusinessAccount(AccountBase):
    account_type: Literal["business"] = "business"
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    documents: list[Document] = Field(default_factory=list)


Account = Annotated[IndividualAccount | BusinessAccount, Field(discriminator="account_type")]

account_adapter: TypeAdapter[IndividualAccount | BusinessAccount] = TypeAdapter(Account)


def parse_account(data: dict[str, Any]) -> IndividualAccount | BusinessAccount:
    """Validate a raw profile document. Missing `accountType` means individual."""
    if "accountType" not in data and "account_type" not in data:
        data = {**data, "accountType": "individual"}
    return account_adapter.validate_python(data)


# =============================================================================
# Requests
# =============================================================================


# Fields an owner may never write through a profile update. Roles and admin
# status flow from claims only; approval fields are written by admin actions.
FORBIDDEN_PROFILE_FIELDS = frozenset(
    {
        "roles",
        "rolesList",
        "admin",
        "accountType",
        "isEmailVerified",
        "documents",
        "id",
        "email",
    }
)

FORBIDDEN_BUSINESS_FIELDS = frozenset(
    {
        "approvalState",
        "isApproved",
        "isCertified",
        "documentsUploadedAt",
        "rejectionReason",
        "approvedAt",
        "rejectedAt",
        "approvedBy",
        "rejectedBy",
    }
)


class ProfileUpdate(CamelModel):
    """Owner-editable profile fields."""

    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    phone: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")


class BusinessInfoUpdate(CamelModel):
    company_name: str | None = None
    tax_number: str | None = None
    business_address: str | None = None
    business_phone: str | None = None


class DocumentCreateRequest(CamelModel):
    """Metadata of a file already uploaded to storage."""

    category: DocumentCategory = DocumentCategory.OTHER
    storage_path: str = Field(..., min_length=1)
    url: str | None = None
    mime_type: str | None = None
    name: str | None = None
