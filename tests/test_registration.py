"""
Tests for pending registration stores.
"""

import pytest

from electro.auth.registration import MemoryPendingRegistrationStore, RedisPendingRegistrationStore
from electro.auth.schemas import AccountType, RegistrationIntent
from electro.config import Settings
from electro.exceptions import ElectroException


class FakeRedis:
    """Subset of redis.asyncio.Redis used by the store."""

    def __init__(self, fail: bool = False):
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int] = {}
        self.fail = fail

    async def set(self, key, value, ex=None):
        if self.fail:
            raise ConnectionError("redis down")
        self.data[key] = value
        self.expiry[key] = ex

    async def getdel(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.data.pop(key, None)

    async def delete(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        self.data.pop(key, None)


def _intent(email="Owner@Volt.com") -> RegistrationIntent:
    return RegistrationIntent(
        email=email,
        first_name="Ayse",
        last_name="Kaya",
        account_type=AccountType.BUSINESS,
        company_name="Volt Ltd",
    )


class TestMemoryStore:
    """Process-local store."""

    @pytest.mark.asyncio
    async def test_consumed_once(self):
        store = MemoryPendingRegistrationStore()
        await store.stage(_intent())

        first = await store.consume("owner@volt.com")
        second = await store.consume("owner@volt.com")

        assert first.company_name == "Volt Ltd"
        assert first.account_type is AccountType.BUSINESS
        assert second is None

    @pytest.mark.asyncio
    async def test_discard(self):
        store = MemoryPendingRegistrationStore()
        await store.stage(_intent())
        await store.discard(" OWNER@volt.com ")

        assert await store.consume("owner@volt.com") is None


class TestRedisStore:
    """Shared store with TTL."""

    @pytest.mark.asyncio
    async def test_stage_sets_ttl_and_prefix(self):
        redis = FakeRedis()
        store = RedisPendingRegistrationStore(Settings(_env_file=None), client=redis)

        await store.stage(_intent())

        assert list(redis.data) == ["pending-registration:owner@volt.com"]
        assert redis.expiry["pending-registration:owner@volt.com"] == 3600

    @pytest.mark.asyncio
    async def test_consume_round_trip(self):
        store = RedisPendingRegistrationStore(Settings(_env_file=None), client=FakeRedis())
        await store.stage(_intent())

        intent = await store.consume("owner@volt.com")

        assert intent.first_name == "Ayse"
        assert await store.consume("owner@volt.com") is None

    @pytest.mark.asyncio
    async def test_malformed_entry_is_dropped(self):
        redis = FakeRedis()
        redis.data["pending-registration:owner@volt.com"] = "{not json"
        store = RedisPendingRegistrationStore(Settings(_env_file=None), client=redis)

        assert await store.consume("owner@volt.com") is None

    @pytest.mark.asyncio
    async def test_outage_raises_on_stage(self):
        store = RedisPendingRegistrationStore(Settings(_env_file=None), client=FakeRedis(fail=True))

        with pytest.raises(ElectroException) as exc_info:
            await store.stage(_intent())

        assert exc_info.value.code == "REGISTRATION_STORE_DOWN"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_outage_on_discard_is_logged_only(self):
        store = RedisPendingRegistrationStore(Settings(_env_file=None), client=FakeRedis(fail=True))
        await store.discard("owner@volt.com")
