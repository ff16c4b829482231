"""
Redis configuration and connection management
"""

import redis.asyncio as redis
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Any
import asyncio
import json
import logging
import time
import uuid

from sportsbnb.config import settings
from sportsbnb.core.exceptions import ResourceBusyError

logger = logging.getLogger(__name__)


RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""
LOCK_POLL_SECONDS = 0.05


class RedisManager:
    """
    Redis manager for short-lived state: token blacklist, 2FA secrets,
    MFA challenges, rate-limit counters and booking locks
    """

    def __init__(self):
        self.client: Optional[redis.Redis] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self) -> redis.Redis:
        """Open the connection pool and verify it answers"""
        try:
            self.client = redis.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True
            )
            await self.client.ping()
            self.logger.info("Redis connection established")
        except Exception as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            raise
        return self.client

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")

    async def get_client(self) -> redis.Redis:
        if not self.client:
            await self.connect()
        return self.client

    async def get(self, key: str) -> Optional[Any]:
        """Get a JSON-decoded value"""
        client = await self.get_client()
        value = await client.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except (TypeError, json.JSONDecodeError):
            return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-encoded value, with optional TTL in seconds"""
        client = await self.get_client()
        payload = json.dumps(value, default=str)
        if ttl:
            return bool(await client.setex(key, ttl, payload))
        return bool(await client.set(key, payload))

    async def delete(self, key: str) -> bool:
        client = await self.get_client()
        return bool(await client.delete(key))

    async def exists(self, key: str) -> bool:
        client = await self.get_client()
        return bool(await client.exists(key))

    # Distributed locking
    async def acquire_lock(self, resource: str, ttl: int = 30) -> Optional[str]:
        """
        Take ``lock:<resource>`` if it is free.

        Returns:
            The owner token, or None while another owner holds the lock
        """
        client = await self.get_client()
        token = uuid.uuid4().hex
        if await client.set(f"lock:{resource}", token, nx=True, ex=ttl):
            return token
        return None

    async def release_lock(self, resource: str, token: str) -> bool:
        """Release the lock only if ``token`` still owns it"""
        client = await self.get_client()
        result = await client.eval(RELEASE_LOCK_SCRIPT, 1, f"lock:{resource}", token)
        return result == 1

    @asynccontextmanager
    async def lock(
        self,
        resource: str,
        ttl: Optional[int] = None,
        wait: Optional[float] = None
    ) -> AsyncIterator[str]:
        """
        Hold ``resource`` for the duration of the block, polling until
        ``wait`` seconds have passed before giving up with ResourceBusyError
        """
        ttl = ttl or settings.BOOKING_LOCK_TTL_SECONDS
        wait = settings.BOOKING_LOCK_WAIT_SECONDS if wait is None else wait
        deadline = time.monotonic() + wait

        token = await self.acquire_lock(resource, ttl)
        while token is None:
            if time.monotonic() >= deadline:
                self.logger.warning(f"Timed out waiting for lock on {resource}")
                raise ResourceBusyError(resource)
            await asyncio.sleep(LOCK_POLL_SECONDS)
            token = await self.acquire_lock(resource, ttl)

        try:
            yield token
        finally:
            if not await self.release_lock(resource, token):
                self.logger.warning(f"Lock on {resource} expired before it was released")

    async def is_rate_limited(
        self,
        key: str,
        limit: int,
        window: int = 60
    ) -> tuple[bool, int]:
        """
        Fixed-window rate limit check.

        Returns:
            Tuple of (is_limited, current_count)
        """
        rate_key = f"rate:{key}"
        try:
            client = await self.get_client()
            count = await client.incr(rate_key)
            if count == 1:
                await client.expire(rate_key, window)
            return count > limit, count
        except Exception as e:
            self.logger.error(f"Error checking rate limit for {key}: {e}")
            return False, 0  # Fail open for rate limiting


# Create global Redis manager
redis_manager = RedisManager()


async def init_redis():
    await redis_manager.connect()


async def close_redis():
    await redis_manager.close()


async def get_redis() -> redis.Redis:
    """
    Get Redis client
    """
    return await redis_manager.get_client()
