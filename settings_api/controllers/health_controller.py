import logging
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from settings_api.db.postgres import SettingsStore
from settings_api.utils.redis_util import SettingsCache

logger = logging.getLogger(__name__)

async def health_check(store: SettingsStore, cache: SettingsCache):
    postgres_ok = True
    redis_ok = True
    try:
        await store.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"PostgreSQL health check failed: {e}")
        postgres_ok = False
    try:
        redis_ok = await cache.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Redis health check failed: {e}")
        redis_ok = False

    healthy = postgres_ok and redis_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "postgres": "connected" if postgres_ok else "disconnected",
            "redis": "connected" if redis_ok else "disconnected",
        },
    )
