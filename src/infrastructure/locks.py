"""
Per-trip Redis lock.

At most one status change per trip is in flight across all API processes.
The lock is ``SET lock:trip:<id> <token> NX EX <ttl>``; release deletes the
key only while it still holds our token (checked atomically in Lua), so a
request whose lock already expired cannot free a newer holder's lock.

The transaction additionally reads the trip row ``FOR UPDATE``.
"""

from __future__ import annotations

import logging
import uuid

import redis.asyncio as aioredis

from src.domain.errors import TripBusy

logger = logging.getLogger(__name__)

# KEYS[1] = lock key, ARGV[1] = owner token
_COMPARE_AND_DELETE = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class TripLock:
    def __init__(
        self, client: aioredis.Redis, trip_id: int, ttl_seconds: int = 10
    ):
        self.client = client
        self.trip_id = trip_id
        self.ttl_seconds = ttl_seconds
        self.owner = uuid.uuid4().hex
        self.held = False

    @property
    def key(self) -> str:
        return f"lock:trip:{self.trip_id}"

    async def acquire(self) -> bool:
        acquired = await self.client.set(
            self.key, self.owner, nx=True, ex=self.ttl_seconds
        )
        self.held = bool(acquired)
        return self.held

    async def release(self) -> bool:
        """Returns False when the lock had already expired."""
        if not self.held:
            return False
        self.held = False
        deleted = await self.client.eval(
            _COMPARE_AND_DELETE, 1, self.key, self.owner
        )
        if not deleted:
            logger.warning(
                "Trip %s lock expired after %ss before release",
                self.trip_id,
                self.ttl_seconds,
            )
        return bool(deleted)

    async def __aenter__(self) -> "TripLock":
        if not await self.acquire():
            logger.warning("Trip %s is locked by another request", self.trip_id)
            raise TripBusy(f"Trip {self.trip_id} is being updated, retry shortly")
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.release()
