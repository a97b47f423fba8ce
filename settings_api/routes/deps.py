from fastapi import Request

from settings_api.db.postgres import SettingsStore
from settings_api.utils.redis_util import SettingsCache


def get_store(request: Request) -> SettingsStore:
    return request.app.state.store


def get_cache(request: Request) -> SettingsCache:
    return request.app.state.cache
