"""
Electro Auth - Schemas.

Pydantic models for sessions, provider claims and auth requests.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from electro.schemas import CamelModel


class AccountType(str, Enum):
    """Account category, fixed at registration."""

    INDIVIDUAL = "individual"
    BUSINESS = "business"


class AuthRole(str, Enum):
    """Well-known role names stored in claims and profile role lists."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class Claims(BaseModel):
    """Signed claims issued by the session provider.

    `admin` is deliberately untyped: only the literal boolean `True` grants
    admin status, so a string "true" must survive validation unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    admin: Any = False
    roles: Any = None
    sub: str | None = None
    email: str | None = None

    @classmethod
    def from_jwt_payload(cls, payload: dict[str, Any]) -> "Claims":
        """Build claims from a decoded Supabase access token.

        Supabase keeps custom claims under `app_metadata`; top-level keys win
        when both are present.
        """
        data = dict(payload)
        app_metadata = payload.get("app_metadata")
        if isinstance(app_metadata, dict):
            for key in ("admin", "roles"):
                if key not in data and key in app_metadata:
                    data[key] = app_metadata[key]
        return cls.model_validate(data)


class SessionUser(BaseModel):
    """Identity as reported by the session provider."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    phone: str | None = None
    photo_url: str | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None


class Session(BaseModel):
    """An authenticated provider session."""

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user: SessionUser


# =============================================================================
# Requests
# =============================================================================


class LoginRequest(BaseModel):
    """Email/password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegistrationIntent(CamelModel):
    """What the user asked for at sign-up, minus the credential.

    Business fields are only meaningful when `account_type` is business; they
    are staged for the profile-creation step.
    """

    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    account_type: AccountType = AccountType.INDIVIDUAL
    company_name: str | None = None
    tax_number: str | None = None
    business_address: str | None = None
    business_phone: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class RegistrationData(RegistrationIntent):
    """Sign-up request. The provider only sees email, password and display name."""

    password: str = Field(..., min_length=1)

    def intent(self) -> RegistrationIntent:
        return RegistrationIntent.model_validate(self.model_dump(exclude={"password"}))


class PasswordResetRequest(BaseModel):
    """Password reset e-mail request."""

    email: EmailStr


class PasswordChangeRequest(BaseModel):
    """Password change for the signed-in user."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class FederatedLoginRequest(BaseModel):
    """Start of an OAuth sign-in."""

    provider: str = "google"
    redirect_to: str | None = None


class CurrentUser(BaseModel):
    """Authenticated caller of an HTTP request, built from a verified token."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    access_token: str
    claims: Claims

    @property
    def is_admin(self) -> bool:
        return self.claims.admin is True
