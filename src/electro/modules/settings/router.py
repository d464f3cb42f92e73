"""
Electro Settings - Router.

System settings: readable by any signed-in user, writable by admins.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from electro.auth import CurrentUser, get_current_user
from electro.deps import require_admin, require_settings
from electro.modules.settings.cache import SettingsCache, get_settings_cache
from electro.modules.settings.schemas import Setting, SettingFilter, SettingsKey, SettingUpdateRequest
from electro.schemas import OperationResult

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
    dependencies=[require_settings],
)


def _respond(result: OperationResult):
    if result.success:
        return result
    return JSONResponse(status_code=502, content=result.model_dump(mode="json"))


@router.get("", response_model=list[Setting], response_model_by_alias=True)
async def list_settings(
    is_active: bool | None = None,
    is_deleted: bool | None = None,
    user: CurrentUser = Depends(get_current_user),
    cache: SettingsCache = Depends(get_settings_cache),
):
    return await cache.get_all(SettingFilter(is_active=is_active, is_deleted=is_deleted))


@router.put("/{key}", dependencies=[require_admin])
async def update_setting(
    key: SettingsKey,
    request: SettingUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Write a setting; a failed write answers 502 with a localized message."""
    return _respond(await cache.update(key, request.value, actor=user.uid))


@router.delete("/{key}", dependencies=[require_admin])
async def delete_setting(
    key: SettingsKey,
    user: CurrentUser = Depends(get_current_user),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """Soft delete."""
    return _respond(await cache.remove(key, actor=user.uid))
