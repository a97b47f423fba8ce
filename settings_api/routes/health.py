from fastapi import APIRouter, Depends

from settings_api.controllers.health_controller import health_check
from settings_api.db.postgres import SettingsStore
from settings_api.routes.deps import get_cache, get_store
from settings_api.utils.redis_util import SettingsCache

router = APIRouter(tags=["Health"])

@router.get("/", summary="Say hello")
async def hello():
    return {"message": "Hello!"}

@router.get("/health", summary="Check PostgreSQL and Redis connections")
async def health(store: SettingsStore = Depends(get_store), cache: SettingsCache = Depends(get_cache)):
    return await health_check(store, cache)
