"""
Electro Settings - Cache.

Read-through cache of system settings, one view per `SettingFilter`. Writes
are optimistic: every cached view shows the new value immediately, and the
views are restored verbatim if the store rejects the write. There is no
locking; concurrent writers race and the last write wins.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from electro.auth.messages import Locale, setting_update_failed_message
from electro.config import get_settings
from electro.core.optimistic import OptimisticMutation
from electro.modules.settings.repository import SettingsRepository
from electro.modules.settings.schemas import Setting, SettingFilter, SettingsKey
from electro.schemas import OperationResult

logger = logging.getLogger(__name__)

ALL_SETTINGS = SettingFilter()

Snapshot = dict[SettingFilter, list[Setting]]


@dataclass
class _View:
    items: list[Setting]
    fetched_at: float


class SettingsCache:
    """Per-filter settings views with optimistic updates."""

    def __init__(
        self,
        repository: SettingsRepository | None = None,
        stale_seconds: float | None = None,
        locale: Locale | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.repository = repository or SettingsRepository()
        self.stale_seconds = settings.settings_cache.stale_seconds if stale_seconds is None else stale_seconds
        self.locale: Locale = locale or settings.app_locale
        self._clock = clock
        self._views: dict[SettingFilter, _View] = {}

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def peek(self, filter: SettingFilter = ALL_SETTINGS) -> list[Setting] | None:
        """Cached view without touching the store; None if not cached."""
        view = self._views.get(filter)
        return list(view.items) if view is not None else None

    def is_stale(self, filter: SettingFilter = ALL_SETTINGS) -> bool:
        view = self._views.get(filter)
        return view is None or self._clock() - view.fetched_at >= self.stale_seconds

    async def _fetch(self, filter: SettingFilter) -> list[Setting]:
        rows = await self.repository.list(filter)
        items = [Setting.model_validate(row) for row in rows]
        self._views[filter] = _View(items=items, fetched_at=self._clock())
        return list(items)

    async def get_all(self, filter: SettingFilter = ALL_SETTINGS) -> list[Setting]:
        if not self.is_stale(filter):
            return list(self._views[filter].items)
        return await self._fetch(filter)

    async def get_value(self, key: SettingsKey, default: Any = None) -> Any:
        """Value of an active, non-deleted setting, or `default`."""
        for setting in await self.get_all(SettingFilter(is_active=True, is_deleted=False)):
            if setting.key is key:
                return setting.value
        return default

    def invalidate(self) -> None:
        self._views.clear()

    # -------------------------------------------------------------------------
    # Optimistic writes
    # -------------------------------------------------------------------------

    def _apply_value(self, key: SettingsKey, value: Any) -> Snapshot:
        snapshot: Snapshot = {f: list(view.items) for f, view in self._views.items()}
        now = datetime.now(timezone.utc)

        for filter, view in self._views.items():
            items = []
            found = False
            for setting in view.items:
                if setting.key is key:
                    setting = setting.model_copy(update={"value": value, "updated_at": now})
                    found = True
                items.append(setting)

            if not found:
                synthesized = Setting(key=key, value=value, is_active=True, is_deleted=False, updated_at=now)
                if filter.admits(synthesized):
                    items.append(synthesized)

            view.items = items
        return snapshot

    def _restore(self, snapshot: Snapshot) -> None:
        for filter, items in snapshot.items():
            view = self._views.get(filter)
            if view is None:
                self._views[filter] = _View(items=list(items), fetched_at=self._clock())
            else:
                view.items = list(items)

    async def _refetch(self, filters: list[SettingFilter]) -> None:
        self.invalidate()
        for filter in filters:
            try:
                await self._fetch(filter)
            except Exception as e:
                # The write already landed; the view is reloaded on next read.
                logger.warning("Settings refetch failed for %s: %s", filter, e)

    async def update(self, key: SettingsKey, value: Any, actor: str | None = None) -> OperationResult[Setting]:
        cached_filters = list(self._views)
        mutation: OptimisticMutation[Snapshot, dict[str, Any]] = OptimisticMutation(
            apply=lambda: self._apply_value(key, value),
            rollback=self._restore,
            label=f"settings:{key.value}",
        )

        async def on_success(_: dict[str, Any]) -> None:
            await self._refetch(cached_filters)

        try:
            row = await mutation.run(lambda: self.repository.write(key, value, actor), on_success=on_success)
        except Exception as e:
            logger.warning("SETTINGS_UPDATE key=%s failed: %s", key.value, e)
            return OperationResult.fail(
                setting_update_failed_message(key.value, None, self.locale),
                code="SETTING_UPDATE_FAILED",
            )

        logger.info("SETTINGS_UPDATE key=%s by=%s -> ok", key.value, actor)
        return OperationResult.ok(Setting.model_validate({"key": key.value, **row}))

    async def remove(self, key: SettingsKey, actor: str | None = None) -> OperationResult[None]:
        """Soft delete: the document stays, flagged deleted and inactive."""
        try:
            await self.repository.soft_delete(key, actor)
        except Exception as e:
            logger.warning("SETTINGS_REMOVE key=%s failed: %s", key.value, e)
            return OperationResult.fail(
                setting_update_failed_message(key.value, None, self.locale),
                code="SETTING_UPDATE_FAILED",
            )
        self.invalidate()
        return OperationResult.ok()


@lru_cache
def get_settings_cache() -> SettingsCache:
    """Process-wide settings cache."""
    return SettingsCache()
