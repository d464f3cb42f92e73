"""
Electro Auth - Context Owner.

Owns the derived auth view for one session: provider session, claims, profile
document, resolved roles, completeness and the next destination. Every change
produces a fresh immutable `AuthSnapshot`; listeners receive snapshots and
never mutate shared state.

Loads are asynchronous and may finish out of order. Each load takes a
generation number and its result is published only if it is still the latest
load and the owner has not been closed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from electro.auth.gateway import classify_provider_error
from electro.auth.messages import AuthErrorCode, Locale, get_auth_error_message
from electro.auth.provider import SessionProvider, Unsubscribe
from electro.auth.roles import RoleState, resolve_roles
from electro.auth.schemas import Claims, Session, SessionUser
from electro.config import get_settings
from electro.exceptions import ElectroException, ProviderError
from electro.modules.accounts.completeness import Destination, has_documents, is_profile_complete, resolve_destination
from electro.modules.accounts.schemas import BusinessAccount, IndividualAccount
from electro.modules.accounts.service import AccountsService

logger = logging.getLogger(__name__)

SnapshotListener = Callable[["AuthSnapshot"], None]


@dataclass(frozen=True)
class AuthSnapshot:
    user: SessionUser | None = None
    claims: Claims | None = None
    account: IndividualAccount | BusinessAccount | None = None
    role_state: RoleState = field(default_factory=RoleState)
    is_profile_complete: bool = False
    has_documents: bool = False
    destination: Destination | None = None
    loading: bool = False
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.role_state.is_admin

    @property
    def roles(self) -> tuple[str, ...]:
        return self.role_state.roles


def build_snapshot(
    user: SessionUser | None,
    claims: Claims | None = None,
    account: IndividualAccount | BusinessAccount | None = None,
    require_approval: bool = True,
    error: str | None = None,
) -> AuthSnapshot:
    """Derive the full auth view from its three inputs."""
    if user is None:
        return AuthSnapshot(error=error)
    return AuthSnapshot(
        user=user,
        claims=claims,
        account=account,
        role_state=resolve_roles(claims, account),
        is_profile_complete=is_profile_complete(account),
        has_documents=has_documents(account),
        destination=resolve_destination(account, require_approval),
        error=error,
    )


class AuthContextOwner:
    """Keeps an `AuthSnapshot` current as the provider session changes."""

    def __init__(
        self,
        provider: SessionProvider,
        accounts: AccountsService,
        require_approval: bool = True,
        locale: Locale | None = None,
    ):
        self.provider = provider
        self.accounts = accounts
        self.require_approval = require_approval
        self.locale: Locale = locale or get_settings().app_locale

        self._snapshot = AuthSnapshot(loading=True)
        self._listeners: list[SnapshotListener] = []
        self._generation = 0
        self._alive = True
        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def snapshot(self) -> AuthSnapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> AuthSnapshot:
        """Subscribe to session changes and load the current session."""
        self._unsubscribe = self.provider.on_session_change(self._on_session_change)
        return await self.refresh(self.provider.get_current_session())

    def _on_session_change(self, session: Session | None) -> None:
        if not self._alive:
            return
        task = asyncio.ensure_future(self.refresh(session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _publish(self, snapshot: AuthSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)

    async def refresh(self, session: Session | None, force_claims: bool = False) -> AuthSnapshot:
        """Load claims and profile for `session` and publish if still current."""
        self._generation += 1
        generation = self._generation

        if session is None:
            if self._alive:
                self._publish(AuthSnapshot())
            return self._snapshot

        user = session.user
        claims: Claims | None = None
        account = None
        error: str | None = None

        try:
            claims = await self.provider.get_claims(force_refresh=force_claims)
        except ProviderError as e:
            logger.warning("AUTH_CONTEXT claims uid=%s failed: %s", user.uid, e)
            error = get_auth_error_message(classify_provider_error(e), self.locale)

        try:
            account = await self.accounts.ensure_account(user)
            account = await self.accounts.reconcile_email_verification(account, user.email_verified)
        except (ElectroException, ValidationError) as e:
            logger.warning("AUTH_CONTEXT profile uid=%s failed: %s", user.uid, e)
            error = get_auth_error_message(AuthErrorCode.UNKNOWN, self.locale)

        if not self._alive or generation != self._generation:
            logger.debug("AUTH_CONTEXT dropping stale load generation=%s", generation)
            return self._snapshot

        self._publish(build_snapshot(user, claims, account, self.require_approval, error))
        return self._snapshot

    async def refresh_claims(self) -> AuthSnapshot:
        """Force a token refresh, e.g. after an admin changed this user's roles."""
        return await self.refresh(self.provider.get_current_session(), force_claims=True)

    async def close(self) -> None:
        self._alive = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
