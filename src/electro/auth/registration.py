"""
Electro Auth - Pending Registrations.

Identity creation (session provider) and profile creation (profile store) are
two writes against two backends with no transaction between them. The
registration intent (account type, business fields) is staged here when the
user signs up and consumed exactly once by the profile-creation step.

Backends:
- memory: process-local, for development and tests
- redis: shared between workers, entries expire after a TTL
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from electro.auth.schemas import RegistrationIntent
from electro.config import Settings, get_settings
from electro.exceptions import ElectroException

logger = logging.getLogger(__name__)


def registration_key(email: str) -> str:
    return (email or "").strip().lower()


class PendingRegistrationStore(ABC):
    """One-time hand-off of registration intent, keyed by e-mail."""

    @abstractmethod
    async def stage(self, data: RegistrationIntent) -> None: ...

    @abstractmethod
    async def consume(self, email: str) -> RegistrationIntent | None:
        """Return and remove the staged intent; None if nothing is staged."""

    @abstractmethod
    async def discard(self, email: str) -> None: ...


class MemoryPendingRegistrationStore(PendingRegistrationStore):
    def __init__(self) -> None:
        self._items: dict[str, dict[str, Any]] = {}

    async def stage(self, data: RegistrationIntent) -> None:
        self._items[registration_key(data.email)] = data.to_document()

    async def consume(self, email: str) -> RegistrationIntent | None:
        raw = self._items.pop(registration_key(email), None)
        if raw is None:
            return None
        return RegistrationIntent.model_validate(raw)

    async def discard(self, email: str) -> None:
        self._items.pop(registration_key(email), None)


class RedisPendingRegistrationStore(PendingRegistrationStore):
    """Redis backed store. GETDEL makes consumption atomic across workers."""

    def __init__(self, settings: Settings, client: Any | None = None):
        self._prefix = settings.redis.pending_registration_prefix
        self._ttl = int(settings.redis.pending_registration_ttl_seconds)
        self._url = settings.redis.url
        self._client = client

    def _redis(self):
        if self._client is None:
            import redis.asyncio as redis

            self._client = redis.Redis.from_url(self._url, decode_responses=True)
        return self._client

    def _key(self, email: str) -> str:
        return f"{self._prefix}{registration_key(email)}"

    async def stage(self, data: RegistrationIntent) -> None:
        try:
            await self._redis().set(self._key(data.email), json.dumps(data.to_document()), ex=self._ttl)
        except Exception as e:
            raise ElectroException(
                code="REGISTRATION_STORE_DOWN",
                message=f"Redis SET failed: {e}",
                status_code=503,
            ) from e

    async def consume(self, email: str) -> RegistrationIntent | None:
        try:
            raw = await self._redis().getdel(self._key(email))
        except Exception as e:
            raise ElectroException(
                code="REGISTRATION_STORE_DOWN",
                message=f"Redis GETDEL failed: {e}",
                status_code=503,
            ) from e
        if raw is None:
            return None
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding malformed pending registration for %s", registration_key(email))
            return None
        return RegistrationIntent.model_validate(loaded)

    async def discard(self, email: str) -> None:
        try:
            await self._redis().delete(self._key(email))
        except Exception as e:
            logger.warning("Could not discard pending registration for %s: %s", registration_key(email), e)


@lru_cache
def get_pending_registration_store() -> PendingRegistrationStore:
    """Process-wide store selected by REGISTRATION_STORE."""
    settings = get_settings()
    if settings.registration.store == "redis":
        return RedisPendingRegistrationStore(settings)
    return MemoryPendingRegistrationStore()
