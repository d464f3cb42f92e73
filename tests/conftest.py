"""
Shared fixtures: in-memory stores and a scripted session provider.

The fakes subclass the real repositories and replace only the table access,
so repository-level logic (setting writes, approval-state queries) still runs.
"""

from copy import deepcopy
from typing import Any

import pytest

from electro.auth.provider import SessionCallback, SessionProvider
from electro.auth.registration import MemoryPendingRegistrationStore
from electro.auth.schemas import Claims, Session, SessionUser
from electro.config import get_settings
from electro.exceptions import NotFoundException, ProviderError
from electro.modules.accounts.repository import ProfilesRepository
from electro.modules.accounts.service import AccountsService
from electro.modules.settings.repository import SettingsRepository


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Stores
# =============================================================================


def _lookup(doc: dict[str, Any], column: str) -> Any:
    if "->>" in column:
        outer, inner = column.split("->>", 1)
        value = (doc.get(outer) or {}).get(inner)
        return None if value is None else str(value)
    return doc.get(column)


class InMemoryTable:
    """Dict-backed replacement for the Supabase table calls of BaseRepository."""

    def __init__(self, table_name: str):
        self._client = None
        self._table_name = table_name
        self.docs: dict[str, dict[str, Any]] = {}
        self.fail_with: Exception | None = None
        self.write_count = 0

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def get(self, key: str) -> dict[str, Any] | None:
        doc = self.docs.get(key)
        return deepcopy(doc) if doc is not None else None

    async def set(self, key: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check()
        self.write_count += 1
        doc = {**deepcopy(data), self.key_column: key}
        self.docs[key] = doc
        return deepcopy(doc)

    async def update(self, key: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check()
        if key not in self.docs:
            raise NotFoundException(self.table_name, key)
        self.write_count += 1
        self.docs[key].update(deepcopy(data))
        return deepcopy(self.docs[key])

    async def query(
        self,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        rows = [
            deepcopy(doc)
            for doc in self.docs.values()
            if all(_lookup(doc, column) == value for column, value in (filters or {}).items() if value is not None)
        ]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""), reverse=descending)
        return rows


class FakeProfilesRepository(InMemoryTable, ProfilesRepository):
    def __init__(self):
        InMemoryTable.__init__(self, "users")


class FakeSettingsRepository(InMemoryTable, SettingsRepository):
    def __init__(self):
        InMemoryTable.__init__(self, "settings")


# =============================================================================
# Session provider
# =============================================================================


class FakeSessionProvider(SessionProvider):
    """Scripted provider. `errors[action]` makes that action raise."""

    def __init__(self):
        self.accounts: dict[str, dict[str, Any]] = {}
        self.session: Session | None = None
        self.claims: dict[str, Any] = {}
        self.errors: dict[str, ProviderError] = {}
        self.calls: list[str] = []
        self._callbacks: list[SessionCallback] = []

    def add_user(self, email: str, password: str, uid: str | None = None, email_verified: bool = True) -> SessionUser:
        user = SessionUser(uid=uid or f"uid-{len(self.accounts) + 1}", email=email, email_verified=email_verified)
        self.accounts[email] = {"password": password, "user": user}
        return user

    def start_session(self, user: SessionUser) -> Session:
        self.session = Session(access_token=f"token-{user.uid}", refresh_token="refresh", user=user)
        return self.session

    def emit(self, session: Session | None) -> None:
        self.session = session
        for callback in list(self._callbacks):
            callback(session)

    def _record(self, action: str) -> None:
        self.calls.append(action)
        if action in self.errors:
            raise self.errors[action]

    async def sign_in(self, email: str, password: str) -> Session:
        self._record("sign_in")
        entry = self.accounts.get(email)
        if entry is None or entry["password"] != password:
            raise ProviderError("invalid_credentials", "Invalid login credentials", 400)
        return self.start_session(entry["user"])

    async def sign_up(self, email: str, password: str, display_name: str | None = None) -> SessionUser:
        self._record("sign_up")
        if email in self.accounts:
            raise ProviderError("user_already_exists", "User already registered", 422)
        user = self.add_user(email, password, email_verified=False)
        return user.model_copy(update={"display_name": display_name})

    async def sign_out(self) -> None:
        self._record("sign_out")
        self.session = None

    async def sign_in_with_federated_provider(self, provider: str = "google", redirect_to: str | None = None) -> str:
        self._record("federated")
        return f"https://auth.example.test/authorize?provider={provider}"

    def get_current_session(self) -> Session | None:
        return self.session

    def on_session_change(self, callback: SessionCallback):
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            self._callbacks.remove(callback)

        return unsubscribe

    async def get_claims(self, force_refresh: bool = False) -> Claims:
        self._record("get_claims_forced" if force_refresh else "get_claims")
        if self.session is None:
            raise ProviderError("session_not_found", "No active session")
        return Claims.from_jwt_payload({"sub": self.session.user.uid, **self.claims})

    async def send_verification_email(self) -> None:
        self._record("send_verification_email")

    async def send_password_reset(self, email: str) -> None:
        self._record("send_password_reset")

    async def reauthenticate(self, password: str) -> None:
        self._record("reauthenticate")
        entry = self.accounts.get(self.session.user.email) if self.session else None
        if entry is None or entry["password"] != password:
            raise ProviderError("invalid_credentials", "Invalid login credentials", 400)

    async def update_password(self, new_password: str) -> None:
        self._record("update_password")
        self.accounts[self.session.user.email]["password"] = new_password


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def profiles_repo() -> FakeProfilesRepository:
    return FakeProfilesRepository()


@pytest.fixture
def settings_repo() -> FakeSettingsRepository:
    return FakeSettingsRepository()


@pytest.fixture
def registrations() -> MemoryPendingRegistrationStore:
    return MemoryPendingRegistrationStore()


@pytest.fixture
def provider() -> FakeSessionProvider:
    return FakeSessionProvider()


@pytest.fixture
def accounts_service(profiles_repo, registrations) -> AccountsService:
    return AccountsService(repository=profiles_repo, registrations=registrations)


@pytest.fixture
def business_doc():
    """Factory for raw business profile documents."""

    def make(**business_info: Any) -> dict[str, Any]:
        documents = business_info.pop("documents", [])
        return {
            "id": "biz-1",
            "email": "owner@volt.com",
            "firstName": "Ayse",
            "lastName": "Kaya",
            "isEmailVerified": True,
            "accountType": "business",
            "rolesList": ["user"],
            "businessInfo": {"companyName": "Volt Ltd", **business_info},
            "documents": documents,
        }

    return make


@pytest.fixture
def license_doc() -> dict[str, Any]:
    return {
        "category": "business_license",
        "storagePath": "documents/biz-1/license.pdf",
        "url": "https://files.example.test/license.pdf",
        "fileType": "pdf",
        "uploadedAt": "2024-01-10T10:00:00+00:00",
    }
