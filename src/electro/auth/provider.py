"""
Electro Auth - Session Provider.

Boundary to the identity provider. The core only talks to `SessionProvider`;
`SupabaseSessionProvider` adapts Supabase Auth to it and converts every
provider failure into `ProviderError` carrying the provider's own error code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
from jose import JWTError, jwt
from supabase import Client
from supabase_auth.errors import AuthApiError, AuthError

from electro.auth.schemas import Claims, Session, SessionUser
from electro.core.supabase_client import create_session_client
from electro.exceptions import ProviderError

logger = logging.getLogger(__name__)

SessionCallback = Callable[[Session | None], None]
Unsubscribe = Callable[[], None]


class SessionProvider(ABC):
    """Identity provider operations consumed by the auth core."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session: ...

    @abstractmethod
    async def sign_up(self, email: str, password: str, display_name: str | None = None) -> SessionUser: ...

    @abstractmethod
    async def sign_out(self) -> None: ...

    @abstractmethod
    async def sign_in_with_federated_provider(self, provider: str = "google", redirect_to: str | None = None) -> str:
        """Start an OAuth flow and return the URL the user must visit."""

    @abstractmethod
    def get_current_session(self) -> Session | None: ...

    @abstractmethod
    def on_session_change(self, callback: SessionCallback) -> Unsubscribe: ...

    @abstractmethod
    async def get_claims(self, force_refresh: bool = False) -> Claims: ...

    @abstractmethod
    async def send_verification_email(self) -> None: ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> None: ...

    @abstractmethod
    async def reauthenticate(self, password: str) -> None:
        """Re-prove the current user's credential."""

    @abstractmethod
    async def update_password(self, new_password: str) -> None: ...


# =============================================================================
# Supabase adapter
# =============================================================================


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def to_session_user(user: Any) -> SessionUser:
    """Map a Supabase auth user onto `SessionUser`."""
    metadata = getattr(user, "user_metadata", None) or {}
    display_name = metadata.get("full_name") or metadata.get("display_name") or metadata.get("name")
    return SessionUser(
        uid=str(user.id),
        email=getattr(user, "email", None),
        email_verified=getattr(user, "email_confirmed_at", None) is not None,
        display_name=display_name,
        phone=getattr(user, "phone", None) or None,
        photo_url=metadata.get("avatar_url") or metadata.get("picture"),
        created_at=_parse_datetime(getattr(user, "created_at", None)),
        last_sign_in_at=_parse_datetime(getattr(user, "last_sign_in_at", None)),
    )


def to_session(session: Any) -> Session | None:
    if session is None or getattr(session, "user", None) is None:
        return None
    return Session(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user=to_session_user(session.user),
    )


class SupabaseSessionProvider(SessionProvider):
    """Supabase Auth backed provider. One instance per user session."""

    def __init__(
        self,
        client: Client | None = None,
        site_url: str = "http://localhost:3000",
    ):
        self._client = client or create_session_client()
        self._site_url = site_url.rstrip("/")

    @property
    def auth(self):
        return self._client.auth

    def _translate(self, exc: Exception) -> ProviderError:
        if isinstance(exc, httpx.TransportError):
            return ProviderError("network-request-failed", str(exc))
        if isinstance(exc, AuthApiError):
            return ProviderError(getattr(exc, "code", None), str(exc), getattr(exc, "status", None))
        if isinstance(exc, AuthError):
            return ProviderError(getattr(exc, "code", None), str(exc))
        return ProviderError(None, str(exc))

    async def restore(self, access_token: str, refresh_token: str) -> Session | None:
        """Attach an existing session (e.g. from request headers) to this client."""
        try:
            response = self.auth.set_session(access_token, refresh_token)
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc
        return to_session(response.session)

    async def sign_in(self, email: str, password: str) -> Session:
        try:
            response = self.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc
        session = to_session(response.session)
        if session is None:
            raise ProviderError("invalid_credentials", "Sign-in returned no session")
        return session

    async def sign_up(self, email: str, password: str, display_name: str | None = None) -> SessionUser:
        options: dict[str, Any] = {"email_redirect_to": f"{self._site_url}/verify-email"}
        if display_name:
            options["data"] = {"full_name": display_name}
        try:
            response = self.auth.sign_up({"email": email, "password": password, "options": options})
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc
        if response.user is None:
            raise ProviderError(None, "Sign-up returned no user")
        return to_session_user(response.user)

    async def sign_out(self) -> None:
        try:
            self.auth.sign_out()
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc

    async def sign_in_with_federated_provider(self, provider: str = "google", redirect_to: str | None = None) -> str:
        try:
            response = self.auth.sign_in_with_oauth(
                {
                    "provider": provider,
                    "options": {
                        "redirect_to": redirect_to or f"{self._site_url}/welcome",
                        "scopes": "email profile",
                    },
                }
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc
        return response.url

    def get_current_session(self) -> Session | None:
        try:
            return to_session(self.auth.get_session())
        except AuthError as exc:
            logger.warning("Could not read current session: %s", str(exc))
            return None

    def on_session_change(self, callback: SessionCallback) -> Unsubscribe:
        def _listener(event: Any, session: Any) -> None:
            callback(to_session(session))

        subscription = self.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    async def get_claims(self, force_refresh: bool = False) -> Claims:
        if force_refresh:
            try:
                response = self.auth.refresh_session()
            except (AuthError, httpx.HTTPError) as exc:
                raise self._translate(exc) from exc
            session = to_session(response.session)
        else:
            session = self.get_current_session()

        if session is None:
            raise ProviderError("session_not_found", "No active session")

        # The token comes straight from the provider; signature checks happen
        # server-side in electro.auth.tokens.
        try:
            payload = jwt.get_unverified_claims(session.access_token)
        except JWTError as exc:
            raise ProviderError("bad_jwt", str(exc)) from exc
        return Claims.from_jwt_payload(payload)

    async def send_verification_email(self) -> None:
        session = self.get_current_session()
        if session is None or not session.user.email:
            raise ProviderError("session_not_found", "No active session")
        try:
            self.auth.resend(
                {
                    "type": "signup",
                    "email": session.user.email,
                    "options": {"email_redirect_to": f"{self._site_url}/action"},
                }
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc

    async def send_password_reset(self, email: str) -> None:
        try:
            self.auth.reset_password_for_email(email, {"redirect_to": f"{self._site_url}/login"})
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc

    async def reauthenticate(self, password: str) -> None:
        session = self.get_current_session()
        if session is None or not session.user.email:
            raise ProviderError("session_not_found", "No active session")
        try:
            self.auth.sign_in_with_password({"email": session.user.email, "password": password})
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc

    async def update_password(self, new_password: str) -> None:
        try:
            self.auth.update_user({"password": new_password})
        except (AuthError, httpx.HTTPError) as exc:
            raise self._translate(exc) from exc


def lookup_identity(uid: str, client: Client | None = None) -> SessionUser | None:
    """Fetch the provider's current view of a user with the service client."""
    from electro.core.supabase_client import get_supabase_client

    client = client or get_supabase_client()
    try:
        response = client.auth.admin.get_user_by_id(uid)
    except (AuthError, httpx.HTTPError) as exc:
        logger.warning("Identity lookup failed for %s: %s", uid, exc)
        return None
    user = getattr(response, "user", None)
    return to_session_user(user) if user is not None else None
