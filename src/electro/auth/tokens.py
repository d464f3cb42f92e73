"""
Electro Auth - Supabase JWT Validation.

Validates access tokens issued by Supabase Auth and turns them into claims.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from electro.auth.schemas import Claims, CurrentUser
from electro.config import Settings, get_settings
from electro.exceptions import UnauthorizedException

# Security scheme
security = HTTPBearer(auto_error=False)


def verify_access_token(
    token: str,
    secret: str,
    audience: str | None = "authenticated",
    algorithms: list[str] | None = None,
) -> dict[str, Any]:
    """
    Verify and decode a Supabase access token.

    Returns:
        The decoded payload

    Raises:
        UnauthorizedException: If the token is invalid, expired or has no subject
    """
    if algorithms is None:
        algorithms = ["HS256"]

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=algorithms,
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {e}")

    exp = payload.get("exp")
    if exp and datetime.fromtimestamp(exp, tz=timezone.utc) < datetime.now(tz=timezone.utc):
        raise UnauthorizedException("Token has expired")

    if not payload.get("sub"):
        raise UnauthorizedException("Malformed token payload: missing sub")

    return payload


def current_user_from_token(token: str, settings: Settings) -> CurrentUser:
    payload = verify_access_token(
        token=token,
        secret=settings.supabase.jwt_secret,
        audience=settings.supabase.jwt_audience or None,
    )
    claims = Claims.from_jwt_payload(payload)
    user_metadata = payload.get("user_metadata") or {}
    return CurrentUser(
        uid=str(payload["sub"]),
        email=payload.get("email"),
        email_verified=user_metadata.get("email_verified") is True,
        access_token=token,
        claims=claims,
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUser:
    """
    FastAPI dependency: the authenticated caller.

    Raises:
        UnauthorizedException: If no token or invalid token
    """
    if not credentials:
        raise UnauthorizedException("Missing authentication token")

    user = current_user_from_token(credentials.credentials, settings)

    # Store user id in request state for access logging
    request.state.user_id = user.uid

    return user


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentUser | None:
    """The caller if a valid token was sent, otherwise None."""
    if not credentials:
        return None

    try:
        return await get_current_user(request, credentials, settings)
    except UnauthorizedException:
        return None
