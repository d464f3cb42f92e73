"""
Electro - Dependency Injection.

FastAPI dependencies for auth, feature flags and request context.
"""

from typing import Annotated
from uuid import UUID, uuid4

from fastapi import Depends, Header

from electro.auth import CurrentUser, get_current_user
from electro.auth.roles import RoleState, resolve_roles
from electro.config import FeatureFlags, Settings, get_settings
from electro.exceptions import FeatureDisabledException, ForbiddenException


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_features(settings: Annotated[Settings, Depends(get_settings)]) -> FeatureFlags:
    """Get feature flags from settings."""
    return settings.features


# =============================================================================
# Request Context
# =============================================================================


def get_request_id(x_request_id: Annotated[str | None, Header()] = None) -> UUID:
    """Get or generate request ID for tracing."""
    if x_request_id:
        try:
            return UUID(x_request_id)
        except ValueError:
            pass
    return uuid4()


def get_role_state(user: Annotated[CurrentUser, Depends(get_current_user)]) -> RoleState:
    """Roles of the caller as carried by their verified token."""
    return resolve_roles(user.claims)


# =============================================================================
# Feature Flag Guards
# =============================================================================


def require_feature(feature_name: str):
    """Create a dependency that requires a specific feature to be enabled."""

    def check_feature(features: Annotated[FeatureFlags, Depends(get_features)]) -> bool:
        if not getattr(features, feature_name, False):
            raise FeatureDisabledException(feature_name)
        return True

    return check_feature


# Specific feature guards
require_accounts = Depends(require_feature("accounts"))
require_approvals = Depends(require_feature("approvals"))
require_settings = Depends(require_feature("settings"))
require_role_admin = Depends(require_feature("role_admin"))


# =============================================================================
# Role Guards
# =============================================================================


def require_role(*allowed_roles: str):
    """Create a dependency that requires one of `allowed_roles`.

    Admins (boolean `admin` claim) pass every role check. An empty role list
    means "admin only".
    """

    async def check_role(roles: Annotated[RoleState, Depends(get_role_state)]) -> bool:
        allowed = roles.has_any_role(allowed_roles) if allowed_roles else roles.is_admin
        if not allowed:
            raise ForbiddenException(
                "Insufficient permissions",
                required_role=", ".join(allowed_roles) or "admin",
            )
        return True

    return Depends(check_role)


require_admin = require_role()
