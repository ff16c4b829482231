"""
Unit tests for Redis manager locking
"""

import pytest

from sportsbnb.core.exceptions import ResourceBusyError
from sportsbnb.core.redis import redis_manager


@pytest.mark.unit
@pytest.mark.asyncio
class TestRedisLocks:
    """Slot and game locks"""

    async def test_acquire_lock(self, fake_redis):
        token = await redis_manager.acquire_lock("slot:test")
        assert token is not None
        assert await fake_redis.get("lock:slot:test") == token

    async def test_acquire_lock_already_locked(self):
        assert await redis_manager.acquire_lock("slot:test") is not None
        assert await redis_manager.acquire_lock("slot:test") is None

    async def test_release_lock_wrong_token(self):
        token = await redis_manager.acquire_lock("slot:test")
        assert await redis_manager.release_lock("slot:test", "someone-else") is False
        assert await redis_manager.release_lock("slot:test", token) is True
        assert await redis_manager.acquire_lock("slot:test") is not None

    async def test_lock_block_releases_on_error(self, fake_redis):
        with pytest.raises(RuntimeError):
            async with redis_manager.lock("game:1"):
                assert await fake_redis.exists("lock:game:1")
                raise RuntimeError("boom")
        assert not await fake_redis.exists("lock:game:1")

    async def test_lock_gives_up_when_busy(self):
        await redis_manager.acquire_lock("game:1")
        with pytest.raises(ResourceBusyError) as exc_info:
            async with redis_manager.lock("game:1", wait=0.1):
                pass
        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"resource": "game:1"}
