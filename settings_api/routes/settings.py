from fastapi import APIRouter, Depends, status
from typing import List

from settings_api.controllers import settings_controller
from settings_api.db.postgres import SettingsStore
from settings_api.routes.deps import get_cache, get_store
from settings_api.schemas.setting_schema import SettingPayload, SettingResponse
from settings_api.utils.redis_util import SettingsCache
from settings_api.utils.security import get_current_username

router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(get_current_username)])

@router.get("", response_model=List[SettingResponse])
async def get_all_settings(
    store: SettingsStore = Depends(get_store),
    cache: SettingsCache = Depends(get_cache),
):
    """
    List every setting, newest first, with `ttl` read live from Redis.
    """
    return await settings_controller.get_settings(store, cache)

@router.get("/{key}", response_model=SettingResponse)
async def get_single_setting(
    key: str,
    store: SettingsStore = Depends(get_store),
    cache: SettingsCache = Depends(get_cache),
):
    """
    Fetch one setting. The key must be integer-shaped.
    """
    return await settings_controller.get_setting(key, store, cache)

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_new_setting(
    payload: SettingPayload,
    store: SettingsStore = Depends(get_store),
    cache: SettingsCache = Depends(get_cache),
):
    """
    Store a setting in PostgreSQL and mirror it into Redis with the given `ttl`.
    Responds with the submitted body.
    """
    return await settings_controller.create_setting(payload, store, cache)

@router.put("/{key}")
async def update_existing_setting(
    key: str,
    payload: SettingPayload,
    store: SettingsStore = Depends(get_store),
    cache: SettingsCache = Depends(get_cache),
):
    """
    Change a setting's value and/or refresh its Redis expiry.
    Responds with the submitted body.
    """
    return await settings_controller.update_setting(key, payload, store, cache)
