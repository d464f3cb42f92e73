"""Electro Auth Module.

Requests authenticate with Supabase access tokens (HS256, signed with the
project JWT secret). Custom claims (`admin`, `roles`) live in `app_metadata`
and are lifted onto `Claims`.
"""

from electro.auth.schemas import Claims, CurrentUser
from electro.auth.tokens import get_current_user, get_optional_user, verify_access_token

__all__ = [
    "get_current_user",
    "get_optional_user",
    "verify_access_token",
    "Claims",
    "CurrentUser",
]
