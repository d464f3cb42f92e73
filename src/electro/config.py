"""
Electro Configuration Module.

Handles all application settings, feature flags, and environment configuration.
Uses pydantic-settings for validation and type safety.

Backend: Supabase (Auth + Postgres + Edge Functions).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    """Feature flags for enabling/disabling modules."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    accounts: bool = True
    approvals: bool = True
    settings: bool = True
    role_admin: bool = True

    def to_dict(self) -> dict[str, bool]:
        """Return feature flags as dictionary for health endpoint."""
        return {
            "accounts": self.accounts,
            "approvals": self.approvals,
            "settings": self.settings,
            "role_admin": self.role_admin,
        }


class SupabaseSettings(BaseSettings):
    """Supabase configuration (auth, tables, edge functions)."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(default="https://demo.supabase.co", description="Supabase project URL")
    anon_key: str = Field(default="demo-anon-key", description="Supabase anonymous key")
    service_role_key: str = Field(default="demo-service-role-key", description="Supabase service role key")
    jwt_secret: str = Field(default="demo-jwt-secret-for-development-only", description="JWT secret for token validation")
    jwt_audience: str = Field(default="authenticated", description="Expected `aud` claim on access tokens")

    profiles_table: str = Field(default="users", description="Table holding one profile document per account")
    settings_table: str = Field(default="settings", description="Table holding system settings keyed by setting name")
    functions_path: str = Field(default="/functions/v1", description="Edge Functions path below the project URL")


class RedisSettings(BaseSettings):
    """Redis configuration (pending registration hand-off)."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    pending_registration_prefix: str = Field(
        default="pending-registration:",
        description="Redis key prefix for staged registration data (key = prefix + <email>)",
    )
    pending_registration_ttl_seconds: int = Field(
        default=3600,
        description="How long staged registration data survives before it is discarded",
    )


class RegistrationSettings(BaseSettings):
    """Where registration intent is staged between sign-up and profile creation."""

    model_config = SettingsConfigDict(env_prefix="REGISTRATION_")

    store: Literal["memory", "redis"] = "memory"


class SettingsCacheSettings(BaseSettings):
    """System settings cache configuration."""

    model_config = SettingsConfigDict(env_prefix="SETTINGS_")

    stale_seconds: float = Field(default=300.0, description="Age after which cached settings are refetched")


class AdminActionSettings(BaseSettings):
    """Privileged edge functions used for business approval."""

    model_config = SettingsConfigDict(env_prefix="ADMIN_ACTIONS_")

    approve_function: str = Field(default="approve-business-account")
    reject_function: str = Field(default="reject-business-account")
    timeout_seconds: float = Field(default=10.0, description="HTTP timeout when calling edge functions")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"
    app_locale: Literal["en", "tr"] = "tr"
    site_url: str = Field(default="http://localhost:3000", description="Public site base URL for auth redirects")

    # Nested settings
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    registration: RegistrationSettings = Field(default_factory=RegistrationSettings)
    settings_cache: SettingsCacheSettings = Field(default_factory=SettingsCacheSettings)
    admin_actions: AdminActionSettings = Field(default_factory=AdminActionSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"

    @property
    def functions_url(self) -> str:
        """Base URL of the Supabase edge functions."""
        base = (self.supabase.url or "").strip().rstrip("/")
        path = (self.supabase.functions_path or "").strip()
        if not path.startswith("/"):
            path = "/" + path
        return f"{base}{path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
