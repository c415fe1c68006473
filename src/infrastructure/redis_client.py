"""
Redis access for trip transition locks.

The connection pool is built lazily so that importing the API never needs
a reachable Redis server; ``close_redis`` runs on application shutdown.
"""

from typing import Optional

import redis.asyncio as aioredis

from src.config import settings

_pool: Optional[aioredis.ConnectionPool] = None


def _connection_pool() -> aioredis.ConnectionPool:
    global _pool
    if _pool is None:
        _pool = aioredis.ConnectionPool.from_url(
            settings.redis_url,
            decode_responses=True,
            max_connections=settings.redis_max_connections,
        )
    return _pool


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency: a client on the shared pool."""
    return aioredis.Redis(connection_pool=_connection_pool())


async def close_redis() -> None:
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None
