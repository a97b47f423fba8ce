import argparse
import logging.config
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from settings_api import __version__
from settings_api.config import settings
from settings_api.db.postgres import SettingsStore, connect_postgres, init_db
from settings_api.logging_config import LOGGING_CONFIG
from settings_api.routes import auth_router, health_router, settings_router
from settings_api.utils.redis_util import SettingsCache, connect_redis

logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Opens the two process-wide backend handles. Handles already placed on
    app.state (tests, embedding) are used as they are.
    """
    owned = []
    try:
        if app.state.store is None:
            engine = await connect_postgres(
                settings.POSTGRES_HOST,
                settings.POSTGRES_PORT,
                settings.POSTGRES_USER,
                settings.POSTGRES_PASSWORD,
                settings.POSTGRES_DB,
            )
            app.state.store = SettingsStore(engine)
            owned.append(app.state.store)
            await init_db(engine)
        if app.state.cache is None:
            client = await connect_redis(settings.REDIS_HOST, settings.REDIS_PORT, settings.REDIS_CONNECT_TIMEOUT)
            app.state.cache = SettingsCache(client)
            owned.append(app.state.cache)
    except Exception as e:
        logger.error(f"❌ Startup aborted: {e}")
        for backend in owned:
            await backend.close()
        raise

    logger.info("🚀 Settings API ready")
    yield

    for backend in owned:
        await backend.close()
    logger.info("🔌 Backend connections closed")


def create_app(store: Optional[SettingsStore] = None, cache: Optional[SettingsCache] = None) -> FastAPI:
    app = FastAPI(
        title="Settings API",
        description="Key/value settings stored in PostgreSQL and mirrored into Redis with an expiry.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.cache = cache

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request body for {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "invalid request body"})

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {duration_ms:.2f}ms")
        return response

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(settings_router)
    return app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the settings API server.")
    parser.add_argument("--host", default=settings.HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Server port")
    parser.add_argument("--db-host", default=settings.POSTGRES_HOST, help="Database host")
    parser.add_argument("--db-port", type=int, default=settings.POSTGRES_PORT, help="Database port")
    parser.add_argument("--db-user", default=settings.POSTGRES_USER, help="Database user")
    parser.add_argument("--db-password", default=settings.POSTGRES_PASSWORD, help="Database password")
    parser.add_argument("--db-name", default=settings.POSTGRES_DB, help="Database name")
    parser.add_argument("--redis-host", default=settings.REDIS_HOST, help="Redis host")
    parser.add_argument("--redis-port", type=int, default=settings.REDIS_PORT, help="Redis port")
    parser.add_argument("--secret", default=settings.JWT_SECRET_KEY, help="JWT secret key")
    return parser.parse_args(argv)


def apply_args(args: argparse.Namespace):
    settings.HOST = args.host
    settings.PORT = args.port
    settings.POSTGRES_HOST = args.db_host
    settings.POSTGRES_PORT = args.db_port
    settings.POSTGRES_USER = args.db_user
    settings.POSTGRES_PASSWORD = args.db_password
    settings.POSTGRES_DB = args.db_name
    settings.REDIS_HOST = args.redis_host
    settings.REDIS_PORT = args.redis_port
    settings.JWT_SECRET_KEY = args.secret


app = create_app()


def main(argv=None):
    apply_args(parse_args(argv))
    logger.info(f"listening on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=LOGGING_CONFIG)


if __name__ == "__main__":
    main()
