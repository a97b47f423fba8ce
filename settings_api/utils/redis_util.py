import asyncio
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


async def connect_redis(host: str, port: int, timeout: float = 5.0) -> aioredis.Redis:
    """
    Create the shared client and PING it, giving up after `timeout` seconds.
    Raises ConnectionError if Redis does not answer.
    """
    client = aioredis.Redis(
        host=host,
        port=port,
        decode_responses=True,
        socket_connect_timeout=timeout,
    )
    try:
        await asyncio.wait_for(client.ping(), timeout=timeout)
    except (RedisError, OSError, asyncio.TimeoutError) as e:
        await client.aclose()
        raise ConnectionError(f"failed to connect to Redis at {host}:{port}: {e}") from e

    logger.info(f"✅ Connected to Redis at {host}:{port}")
    return client


class SettingsCache:
    """Expiry-aware mirror of setting values. Expiry is Redis' own key TTL."""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def set_with_expiry(self, key: str, value: str, ttl: int):
        await self.client.set(key, value, ex=ttl)

    async def remaining_expiry(self, key: str) -> Optional[int]:
        # TTL answers -2 for a missing key and -1 for a key without expiry
        ttl = await self.client.ttl(key)
        if ttl is None or ttl < 0:
            return None
        return int(ttl)

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self):
        await self.client.aclose()
