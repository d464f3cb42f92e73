"""
Electro Auth - Role Resolution.

Merges provider claims and the profile document's role list into one role set.

Admin status comes only from the provider-signed boolean claim `admin`. A role
string "admin" is stripped from the merged set wherever it comes from, since
profile documents are writable by their owners.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class RoleState:
    """Derived authorization view. Immutable; rebuilt on every input change."""

    roles: tuple[str, ...] = ()
    is_admin: bool = False

    @property
    def _lowered(self) -> frozenset[str]:
        return frozenset(role.lower() for role in self.roles)

    def has_role(self, role: str) -> bool:
        """Admins satisfy every role check."""
        return self.is_admin or role.lower() in self._lowered

    def has_any_role(self, roles: Iterable[str]) -> bool:
        if self.is_admin:
            return True
        lowered = self._lowered
        return any(role.lower() in lowered for role in roles)


def _as_mapping(source: Any) -> Mapping[str, Any]:
    if source is None:
        return {}
    if isinstance(source, BaseModel):
        return source.model_dump(by_alias=True)
    if isinstance(source, Mapping):
        return source
    raise TypeError(f"Unsupported role source: {type(source).__name__}")


def _string_list(raw: Any) -> list[str]:
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, (list, tuple)):
        return [item for item in raw if isinstance(item, str)]
    return []


def claim_roles(claims: Any) -> list[str]:
    """Roles carried by claims; a single string is treated as a one-item list."""
    return _string_list(_as_mapping(claims).get("roles"))


def profile_roles(account: Any) -> list[str]:
    """Roles stored on the profile (`rolesList`, falling back to legacy `roles`)."""
    data = _as_mapping(account)
    raw = data.get("rolesList")
    if raw is None:
        raw = data.get("roles_list")
    if raw is None:
        raw = data.get("roles")
    return _string_list(raw)


def is_admin_claim(claims: Any) -> bool:
    """True only for a literal boolean `admin: true` claim."""
    return _as_mapping(claims).get("admin") is True


def merge_roles(*sources: Iterable[str]) -> tuple[str, ...]:
    """Union preserving first-seen order and casing, without any "admin" entry."""
    merged: dict[str, None] = {}
    for source in sources:
        for role in source:
            if role.lower() == ADMIN_ROLE:
                continue
            merged.setdefault(role, None)
    return tuple(merged)


def resolve_roles(claims: Any = None, account: Any = None) -> RoleState:
    """Build the role view from (nullable) claims and (nullable) profile."""
    return RoleState(
        roles=merge_roles(claim_roles(claims), profile_roles(account)),
        is_admin=is_admin_claim(claims),
    )
