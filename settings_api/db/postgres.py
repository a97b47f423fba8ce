import logging
from typing import List, Optional

from sqlalchemy import select, text, update
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from settings_api.db.models import Base, Setting

logger = logging.getLogger(__name__)


async def connect_postgres(host: str, port: int, user: str, password: str, db_name: str) -> AsyncEngine:
    """
    Create the shared engine and verify the server answers before returning it.
    Raises ConnectionError if PostgreSQL cannot be reached or authenticated.
    """
    url = URL.create(
        "postgresql+asyncpg",
        username=user,
        password=password,
        host=host,
        port=port,
        database=db_name,
    )
    engine = create_async_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=10,
        pool_recycle=300,
        pool_timeout=10,
        connect_args={
            "server_settings": {"application_name": "settings_api"},
            "timeout": 5,  # initial connection
        },
    )
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        raise ConnectionError(f"failed to connect to PostgreSQL at {host}:{port}: {e}") from e

    logger.info(f"✅ Connected to PostgreSQL at {host}:{port}/{db_name}")
    return engine


async def init_db(engine: AsyncEngine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class SettingsStore:
    """Keyed CRUD over the settings table. Errors propagate as SQLAlchemyError."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def get_by_key(self, key: str) -> Optional[Setting]:
        async with self.session_factory() as db:
            result = await db.execute(select(Setting).where(Setting.key == key))
            return result.scalars().first()

    async def list_all(self) -> List[Setting]:
        async with self.session_factory() as db:
            result = await db.execute(select(Setting).order_by(Setting.id.desc()))
            return list(result.scalars().all())

    async def insert(self, key: str, value: str) -> Setting:
        async with self.session_factory() as db:
            setting = Setting(key=key, value=value)
            db.add(setting)
            await db.commit()
            await db.refresh(setting)
            return setting

    async def update_value(self, key: str, value: str) -> int:
        """Returns the number of matched rows; zero is not an error."""
        async with self.session_factory() as db:
            result = await db.execute(
                update(Setting).where(Setting.key == key).values(value=value)
            )
            await db.commit()
            return result.rowcount

    async def ping(self):
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self):
        await self.engine.dispose()
