"""
Tests for the settings cache and optimistic mutations.
"""

import pytest

from electro.core.optimistic import OptimisticMutation
from electro.exceptions import ExternalServiceException
from electro.modules.settings.cache import SettingsCache
from electro.modules.settings.schemas import SettingFilter, SettingsKey

ACTIVE = SettingFilter(is_active=True, is_deleted=False)


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache(settings_repo, clock) -> SettingsCache:
    settings_repo.docs["maintenanceMode"] = {"key": "maintenanceMode", "value": False, "isActive": True, "isDeleted": False}
    settings_repo.docs["maxFileSize"] = {"key": "maxFileSize", "value": 10, "isActive": True, "isDeleted": False}
    return SettingsCache(repository=settings_repo, stale_seconds=300, locale="en", clock=clock)


def _values(items):
    return {setting.key.value: setting.value for setting in items}


class TestOptimisticMutation:
    """Generic apply / rollback helper."""

    @pytest.mark.asyncio
    async def test_success_keeps_applied_state(self):
        state = {"value": 1}

        def apply():
            previous = dict(state)
            state["value"] = 2
            return previous

        mutation = OptimisticMutation(apply=apply, rollback=lambda prev: state.update(prev))

        async def remote():
            assert state["value"] == 2
            return "ok"

        assert await mutation.run(remote) == "ok"
        assert state["value"] == 2
        assert mutation.rolled_back is False

    @pytest.mark.asyncio
    async def test_failure_restores_snapshot_and_reraises(self):
        state = {"value": 1}

        def apply():
            previous = dict(state)
            state["value"] = 2
            return previous

        mutation = OptimisticMutation(apply=apply, rollback=lambda prev: state.update(prev))

        async def remote():
            raise ExternalServiceException("store", "down")

        with pytest.raises(ExternalServiceException):
            await mutation.run(remote)

        assert state["value"] == 1
        assert mutation.rolled_back is True


class TestReads:
    """Read-through per filter with a stale window."""

    @pytest.mark.asyncio
    async def test_cached_until_stale(self, cache, settings_repo, clock):
        first = await cache.get_all()
        settings_repo.docs["maxFileSize"]["value"] = 50

        clock.now += 299
        assert _values(await cache.get_all()) == _values(first)

        clock.now += 1
        assert _values(await cache.get_all())["maxFileSize"] == 50

    @pytest.mark.asyncio
    async def test_views_are_per_filter(self, cache, settings_repo):
        settings_repo.docs["autoBackup"] = {"key": "autoBackup", "value": True, "isActive": False, "isDeleted": True}

        everything = await cache.get_all()
        active = await cache.get_all(ACTIVE)

        assert "autoBackup" in _values(everything)
        assert "autoBackup" not in _values(active)

    @pytest.mark.asyncio
    async def test_get_value(self, cache):
        assert await cache.get_value(SettingsKey.MAX_FILE_SIZE) == 10
        assert await cache.get_value(SettingsKey.BUSINESS_ACCOUNT_APPROVAL, True) is True


class TestUpdate:
    """Optimistic writes."""

    @pytest.mark.asyncio
    async def test_success_is_visible_afterwards(self, cache):
        await cache.get_all()

        result = await cache.update(SettingsKey.MAINTENANCE_MODE, True, actor="admin-1")

        assert result.success is True
        assert _values(await cache.get_all())["maintenanceMode"] is True

    @pytest.mark.asyncio
    async def test_value_is_shown_before_the_write_lands(self, cache, settings_repo):
        await cache.get_all(ACTIVE)
        seen = {}
        original_write = settings_repo.write

        async def observing_write(key, value, actor=None):
            seen["view"] = _values(cache.peek(ACTIVE))
            return await original_write(key, value, actor)

        settings_repo.write = observing_write
        await cache.update(SettingsKey.MAX_FILE_SIZE, 25)

        assert seen["view"]["maxFileSize"] == 25

    @pytest.mark.asyncio
    async def test_failure_reverts_and_names_setting(self, cache, settings_repo):
        before = await cache.get_all()
        settings_repo.fail_with = ExternalServiceException("supabase", "timeout")

        result = await cache.update(SettingsKey.MAINTENANCE_MODE, True)

        assert result.success is False
        assert result.code == "SETTING_UPDATE_FAILED"
        assert "Maintenance Mode" in result.error
        assert cache.peek() == before
        assert _values(await cache.get_all())["maintenanceMode"] is False

    @pytest.mark.asyncio
    async def test_missing_key_is_synthesized_in_admitting_views(self, cache, settings_repo):
        await cache.get_all(ACTIVE)
        await cache.get_all(SettingFilter(is_deleted=True))
        settings_repo.fail_with = ExternalServiceException("supabase", "timeout")
        seen = {}

        original_apply = cache._apply_value

        def spying_apply(key, value):
            snapshot = original_apply(key, value)
            seen["active"] = _values(cache.peek(ACTIVE))
            seen["deleted"] = _values(cache.peek(SettingFilter(is_deleted=True)))
            return snapshot

        cache._apply_value = spying_apply
        await cache.update(SettingsKey.SESSION_TIMEOUT, 30)

        assert seen["active"]["sessionTimeout"] == 30
        assert "sessionTimeout" not in seen["deleted"]
        # rolled back
        assert "sessionTimeout" not in _values(cache.peek(ACTIVE))

    @pytest.mark.asyncio
    async def test_first_write_creates_document(self, cache, settings_repo):
        result = await cache.update(SettingsKey.ALLOWED_FILE_TYPES, ["pdf", "jpg"], actor="admin-1")

        assert result.success is True
        doc = settings_repo.docs["allowedFileTypes"]
        assert doc["value"] == ["pdf", "jpg"]
        assert doc["isActive"] is True
        assert doc["isDeleted"] is False
        assert doc["updatedBy"] == "admin-1"

    @pytest.mark.asyncio
    async def test_turkish_failure_message(self, settings_repo, clock):
        cache = SettingsCache(repository=settings_repo, stale_seconds=300, locale="tr", clock=clock)
        settings_repo.fail_with = ExternalServiceException("supabase", "timeout")

        result = await cache.update(SettingsKey.MAINTENANCE_MODE, True)

        assert result.error.startswith("Bakım Modu güncellenemedi:")


class TestRemove:
    """Soft delete."""

    @pytest.mark.asyncio
    async def test_soft_delete_keeps_document(self, cache, settings_repo):
        await cache.get_all(ACTIVE)

        result = await cache.remove(SettingsKey.MAX_FILE_SIZE, actor="admin-1")

        assert result.success is True
        assert settings_repo.docs["maxFileSize"]["isDeleted"] is True
        assert "maxFileSize" not in _values(await cache.get_all(ACTIVE))


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, cache, settings_repo):
        await cache.get_all()
        settings_repo.docs["maxFileSize"]["value"] = 99

        cache.invalidate()

        assert cache.peek() is None
        assert _values(await cache.get_all())["maxFileSize"] == 99


class TestFailureMessages:
    """Store error text is logged, never shown."""

    STORE_ERROR = "{'code': '42501', 'message': 'permission denied for table settings'}"

    @pytest.mark.asyncio
    async def test_update_hides_store_error(self, cache, settings_repo):
        settings_repo.fail_with = RuntimeError(self.STORE_ERROR)

        result = await cache.update(SettingsKey.MAINTENANCE_MODE, True)

        assert result.error == "Maintenance Mode could not be updated: Update failed"
        assert "42501" not in result.error

    @pytest.mark.asyncio
    async def test_remove_hides_store_error(self, cache, settings_repo):
        settings_repo.fail_with = RuntimeError(self.STORE_ERROR)

        result = await cache.remove(SettingsKey.MAX_FILE_SIZE)

        assert result.success is False
        assert "permission denied" not in result.error
