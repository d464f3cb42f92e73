"""
Tests for the auth action gateway.
"""

import pytest

from electro.auth.gateway import AuthActionGateway, classify_provider_error
from electro.auth.messages import AuthErrorCode, get_auth_error_message
from electro.auth.schemas import RegistrationData
from electro.exceptions import ProviderError


@pytest.fixture
def gateway(provider, registrations) -> AuthActionGateway:
    return AuthActionGateway(provider, registrations, locale="en")


class TestErrorTaxonomy:
    """Provider codes map onto the public taxonomy."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("invalid_credentials", AuthErrorCode.INVALID_CREDENTIALS),
            ("auth/wrong-password", AuthErrorCode.INVALID_CREDENTIALS),
            ("user_already_exists", AuthErrorCode.EMAIL_ALREADY_IN_USE),
            ("weak_password", AuthErrorCode.WEAK_PASSWORD),
            ("user_banned", AuthErrorCode.ACCOUNT_DISABLED),
            ("auth/popup-closed-by-user", AuthErrorCode.USER_CANCELLED),
            ("network-request-failed", AuthErrorCode.NETWORK_UNAVAILABLE),
            ("something_new", AuthErrorCode.UNKNOWN),
            (None, AuthErrorCode.UNKNOWN),
        ],
    )
    def test_classification(self, code, expected):
        assert classify_provider_error(ProviderError(code)) is expected

    def test_http_429_without_code_is_rate_limited(self):
        assert classify_provider_error(ProviderError(None, status=429)) is AuthErrorCode.RATE_LIMITED

    def test_every_code_has_both_locales(self):
        for code in AuthErrorCode:
            assert get_auth_error_message(code, "en")
            assert get_auth_error_message(code, "tr")


class TestLogin:
    """Sign-in."""

    @pytest.mark.asyncio
    async def test_success(self, gateway, provider):
        provider.add_user("ali@example.com", "secret1")

        result = await gateway.login("ali@example.com", "secret1")

        assert result.success is True
        assert result.data.user.email == "ali@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password(self, gateway, provider):
        provider.add_user("ali@example.com", "secret1")

        result = await gateway.login("ali@example.com", "nope")

        assert result.success is False
        assert result.code == "invalid-credentials"
        assert result.error == get_auth_error_message(AuthErrorCode.INVALID_CREDENTIALS, "en")

    @pytest.mark.asyncio
    async def test_malformed_email_never_reaches_provider(self, gateway, provider):
        result = await gateway.login("not-an-email", "secret1")

        assert result.code == "invalid-email"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_rate_limited(self, gateway, provider):
        provider.errors["sign_in"] = ProviderError("over_request_rate_limit", status=429)

        result = await gateway.login("ali@example.com", "secret1")

        assert result.code == "rate-limited"
        # no retry
        assert provider.calls == ["sign_in"]


class TestRegister:
    """Sign-up stages the registration intent."""

    def _data(self, **overrides):
        data = {
            "email": "owner@volt.com",
            "password": "secret1",
            "firstName": "Ayse",
            "lastName": "Kaya",
            "accountType": "business",
            "companyName": "Volt Ltd",
        }
        data.update(overrides)
        return RegistrationData.model_validate(data)

    @pytest.mark.asyncio
    async def test_intent_is_staged_without_password(self, gateway, registrations):
        result = await gateway.register(self._data())

        assert result.success is True
        intent = await registrations.consume("OWNER@volt.com")
        assert intent.company_name == "Volt Ltd"
        assert intent.account_type.value == "business"
        assert "password" not in intent.to_document()

    @pytest.mark.asyncio
    async def test_provider_failure_discards_intent(self, gateway, provider, registrations):
        provider.add_user("owner@volt.com", "other")

        result = await gateway.register(self._data())

        assert result.code == "email-already-in-use"
        assert await registrations.consume("owner@volt.com") is None


class TestSessionActions:
    """Actions that need a signed-in user."""

    @pytest.mark.asyncio
    async def test_verification_email_needs_session(self, gateway, provider):
        result = await gateway.send_email_verification()

        assert result.code == "not-authenticated"
        assert "send_verification_email" not in provider.calls

    @pytest.mark.asyncio
    async def test_change_password_reauthenticates_first(self, gateway, provider):
        user = provider.add_user("ali@example.com", "secret1")
        provider.start_session(user)

        result = await gateway.change_password("secret1", "secret2")

        assert result.success is True
        assert provider.calls == ["reauthenticate", "update_password"]

    @pytest.mark.asyncio
    async def test_failed_reauthentication_skips_update(self, gateway, provider):
        user = provider.add_user("ali@example.com", "secret1")
        provider.start_session(user)

        result = await gateway.change_password("wrong", "secret2")

        assert result.success is False
        assert result.code == "invalid-credentials"
        assert "update_password" not in provider.calls

    @pytest.mark.asyncio
    async def test_federated_login_returns_url(self, gateway):
        result = await gateway.login_with_federated_provider("google")

        assert result.success is True
        assert result.data.startswith("https://")

    @pytest.mark.asyncio
    async def test_cancelled_federated_login(self, gateway, provider):
        provider.errors["federated"] = ProviderError("access_denied")

        result = await gateway.login_with_federated_provider("google")

        assert result.code == "user-cancelled"

    @pytest.mark.asyncio
    async def test_refresh_claims(self, gateway, provider):
        user = provider.add_user("ali@example.com", "secret1")
        provider.start_session(user)
        provider.claims = {"roles": ["moderator"]}

        result = await gateway.refresh_claims()

        assert result.data.roles == ["moderator"]
        assert provider.calls == ["get_claims_forced"]

    @pytest.mark.asyncio
    async def test_turkish_messages(self, provider, registrations):
        gateway = AuthActionGateway(provider, registrations, locale="tr")

        result = await gateway.reset_password("bad")

        assert result.error == "Geçersiz e-posta adresi"
