"""
Electro Auth - Action Gateway.

Single choke point for every auth action sent to the session provider. Each
action returns an `OperationResult`; provider error codes are folded into the
public `AuthErrorCode` taxonomy and a localized message. Nothing is retried:
a failure is final for that attempt and the caller decides what to do next.
"""

from __future__ import annotations

import logging

from pydantic import EmailStr, TypeAdapter, ValidationError

from electro.auth.messages import AuthErrorCode, Locale, get_auth_error_message
from electro.auth.provider import SessionProvider
from electro.auth.registration import PendingRegistrationStore
from electro.auth.schemas import Claims, RegistrationData, Session, SessionUser
from electro.exceptions import ProviderError
from electro.schemas import OperationResult

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)

# Provider codes (Supabase Auth, plus the auth/* codes older clients send).
PROVIDER_ERROR_CODES: dict[str, AuthErrorCode] = {
    "invalid_credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "invalid_grant": AuthErrorCode.INVALID_CREDENTIALS,
    "auth/wrong-password": AuthErrorCode.INVALID_CREDENTIALS,
    "auth/invalid-credential": AuthErrorCode.INVALID_CREDENTIALS,
    "auth/invalid-login-credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "email_exists": AuthErrorCode.EMAIL_ALREADY_IN_USE,
    "user_already_exists": AuthErrorCode.EMAIL_ALREADY_IN_USE,
    "auth/email-already-in-use": AuthErrorCode.EMAIL_ALREADY_IN_USE,
    "weak_password": AuthErrorCode.WEAK_PASSWORD,
    "auth/weak-password": AuthErrorCode.WEAK_PASSWORD,
    "user_banned": AuthErrorCode.ACCOUNT_DISABLED,
    "auth/user-disabled": AuthErrorCode.ACCOUNT_DISABLED,
    "user_not_found": AuthErrorCode.USER_NOT_FOUND,
    "auth/user-not-found": AuthErrorCode.USER_NOT_FOUND,
    "over_request_rate_limit": AuthErrorCode.RATE_LIMITED,
    "over_email_send_rate_limit": AuthErrorCode.RATE_LIMITED,
    "over_sms_send_rate_limit": AuthErrorCode.RATE_LIMITED,
    "auth/too-many-requests": AuthErrorCode.RATE_LIMITED,
    "network-request-failed": AuthErrorCode.NETWORK_UNAVAILABLE,
    "auth/network-request-failed": AuthErrorCode.NETWORK_UNAVAILABLE,
    "auth/timeout": AuthErrorCode.NETWORK_UNAVAILABLE,
    "access_denied": AuthErrorCode.USER_CANCELLED,
    "auth/popup-closed-by-user": AuthErrorCode.USER_CANCELLED,
    "auth/cancelled-popup-request": AuthErrorCode.USER_CANCELLED,
    "auth/redirect-cancelled-by-user": AuthErrorCode.USER_CANCELLED,
    "email_address_invalid": AuthErrorCode.INVALID_EMAIL,
    "auth/invalid-email": AuthErrorCode.INVALID_EMAIL,
    "session_not_found": AuthErrorCode.NOT_AUTHENTICATED,
    "no_authorization": AuthErrorCode.NOT_AUTHENTICATED,
}


def classify_provider_error(error: ProviderError) -> AuthErrorCode:
    """Map a provider failure onto the public taxonomy."""
    if error.code and error.code in PROVIDER_ERROR_CODES:
        return PROVIDER_ERROR_CODES[error.code]
    if error.status == 429:
        return AuthErrorCode.RATE_LIMITED
    return AuthErrorCode.UNKNOWN


class AuthActionGateway:
    """Uniform wrapper around the session provider's auth actions."""

    def __init__(
        self,
        provider: SessionProvider,
        registrations: PendingRegistrationStore,
        locale: Locale = "tr",
    ):
        self.provider = provider
        self.registrations = registrations
        self.locale = locale

    def _fail(self, code: AuthErrorCode) -> OperationResult:
        return OperationResult.fail(get_auth_error_message(code, self.locale), code=code.value)

    def _provider_failure(self, action: str, error: ProviderError) -> OperationResult:
        code = classify_provider_error(error)
        logger.warning(
            "AUTH_%s failed provider_code=%s status=%s -> %s",
            action.upper(),
            error.code,
            error.status,
            code.value,
        )
        return self._fail(code)

    def _valid_email(self, email: str) -> bool:
        try:
            _email_adapter.validate_python(email)
        except ValidationError:
            return False
        return True

    async def login(self, email: str, password: str) -> OperationResult[Session]:
        if not self._valid_email(email):
            return self._fail(AuthErrorCode.INVALID_EMAIL)
        try:
            session = await self.provider.sign_in(email, password)
        except ProviderError as e:
            return self._provider_failure("login", e)
        logger.info("AUTH_LOGIN uid=%s -> ok", session.user.uid)
        return OperationResult.ok(session)

    async def register(self, data: RegistrationData) -> OperationResult[SessionUser]:
        """Create the identity and stage the registration intent.

        The intent is staged before the provider call so the profile-creation
        step triggered by the new session can find it; it is discarded again
        when the provider rejects the sign-up.
        """
        await self.registrations.stage(data.intent())
        try:
            user = await self.provider.sign_up(data.email, data.password, data.display_name or None)
        except ProviderError as e:
            await self.registrations.discard(data.email)
            return self._provider_failure("register", e)
        logger.info("AUTH_REGISTER uid=%s account_type=%s -> ok", user.uid, data.account_type.value)
        return OperationResult.ok(user)

    async def logout(self) -> OperationResult[None]:
        try:
            await self.provider.sign_out()
        except ProviderError as e:
            return self._provider_failure("logout", e)
        return OperationResult.ok()

    async def login_with_federated_provider(
        self,
        provider: str = "google",
        redirect_to: str | None = None,
    ) -> OperationResult[str]:
        """Start a federated sign-in; `data` is the URL to send the user to."""
        try:
            url = await self.provider.sign_in_with_federated_provider(provider, redirect_to)
        except ProviderError as e:
            return self._provider_failure("federated_login", e)
        return OperationResult.ok(url)

    async def send_email_verification(self) -> OperationResult[None]:
        if self.provider.get_current_session() is None:
            return self._fail(AuthErrorCode.NOT_AUTHENTICATED)
        try:
            await self.provider.send_verification_email()
        except ProviderError as e:
            return self._provider_failure("send_email_verification", e)
        return OperationResult.ok()

    async def reset_password(self, email: str) -> OperationResult[None]:
        if not self._valid_email(email):
            return self._fail(AuthErrorCode.INVALID_EMAIL)
        try:
            await self.provider.send_password_reset(email)
        except ProviderError as e:
            return self._provider_failure("reset_password", e)
        return OperationResult.ok()

    async def change_password(self, current_password: str, new_password: str) -> OperationResult[None]:
        """Re-authenticate, then update. The update is never sent if re-auth fails."""
        if self.provider.get_current_session() is None:
            return self._fail(AuthErrorCode.NOT_AUTHENTICATED)
        try:
            await self.provider.reauthenticate(current_password)
        except ProviderError as e:
            return self._provider_failure("reauthenticate", e)
        try:
            await self.provider.update_password(new_password)
        except ProviderError as e:
            return self._provider_failure("change_password", e)
        return OperationResult.ok()

    async def refresh_claims(self) -> OperationResult[Claims]:
        """Force a token refresh and return the new claims."""
        try:
            claims = await self.provider.get_claims(force_refresh=True)
        except ProviderError as e:
            return self._provider_failure("refresh_claims", e)
        return OperationResult.ok(claims)
