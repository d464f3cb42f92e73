"""
Tests for configuration module.
"""

import pytest


class TestFeatureFlags:
    """Feature flags tests."""

    def test_default_features_enabled(self):
        """Test all features are enabled by default."""
        from electro.config import FeatureFlags

        flags = FeatureFlags()
        assert flags.accounts is True
        assert flags.approvals is True
        assert flags.settings is True
        assert flags.role_admin is True

    def test_to_dict(self):
        """Test feature flags to dict."""
        from electro.config import FeatureFlags

        flags = FeatureFlags()
        result = flags.to_dict()

        assert isinstance(result, dict)
        assert len(result) == 4
        assert result["approvals"] is True

    def test_env_override(self, monkeypatch):
        from electro.config import FeatureFlags

        monkeypatch.setenv("FEATURE_APPROVALS", "false")
        assert FeatureFlags().approvals is False


class TestSettings:
    """Application settings tests."""

    def test_defaults(self, monkeypatch):
        from electro.config import Settings

        monkeypatch.delenv("APP_LOCALE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.app_locale == "tr"
        assert settings.registration.store == "memory"
        assert settings.settings_cache.stale_seconds == 300.0
        assert settings.is_production is False

    @pytest.mark.parametrize(
        "url,path,expected",
        [
            ("https://abc.supabase.co", "/functions/v1", "https://abc.supabase.co/functions/v1"),
            ("https://abc.supabase.co/", "functions/v1", "https://abc.supabase.co/functions/v1"),
        ],
    )
    def test_functions_url(self, monkeypatch, url, path, expected):
        from electro.config import Settings

        monkeypatch.setenv("SUPABASE_URL", url)
        monkeypatch.setenv("SUPABASE_FUNCTIONS_PATH", path)
        assert Settings(_env_file=None).functions_url == expected


class TestExceptions:
    """Exception tests."""

    def test_unauthorized_exception(self):
        """Test UnauthorizedException."""
        from electro.exceptions import UnauthorizedException

        exc = UnauthorizedException()
        assert exc.status_code == 401
        assert exc.code == "UNAUTHORIZED"

    def test_not_found_exception(self):
        """Test NotFoundException."""
        from electro.exceptions import NotFoundException

        exc = NotFoundException("account", "123")
        assert exc.status_code == 404
        assert exc.code == "NOT_FOUND"
        assert "account" in exc.message

    def test_feature_disabled_exception(self):
        from electro.exceptions import FeatureDisabledException

        exc = FeatureDisabledException("settings")
        assert exc.status_code == 503
        assert exc.code == "FEATURE_DISABLED"
        assert "settings" in exc.message

    def test_conflict_exception(self):
        """Test ConflictException."""
        from electro.exceptions import ConflictException

        exc = ConflictException(
            "Cannot approve",
            current_state="documents_pending",
            target_state="approved"
        )
        assert exc.status_code == 409
        assert exc.code == "CONFLICT"
        assert exc.details["current_state"] == "documents_pending"

    def test_provider_error_keeps_code(self):
        from electro.exceptions import ProviderError

        exc = ProviderError("over_request_rate_limit", status=429)
        assert exc.code == "over_request_rate_limit"
        assert exc.status == 429
        assert str(exc) == "over_request_rate_limit"
