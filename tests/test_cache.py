"""
缓存单元测试

测试 app/infra/cache.py：
- 进程内缓存的 TTL 过期
- Redis 缓存读写与降级
- get_cache 根据配置选择实现
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.infra.cache import MemoryCache, RedisCache, get_cache


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestMemoryCache:
    """测试进程内缓存"""

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        cache = MemoryCache("test:")

        await cache.set_json("countries", [{"common_name": "Perú"}], ttl_seconds=60)

        assert await cache.get_json("countries") == [{"common_name": "Perú"}]
        assert await cache.get_json("missing") is None

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self):
        clock = FakeClock()
        cache = MemoryCache("test:", clock=clock)
        await cache.set_json("countries", ["Peru"], ttl_seconds=60)

        clock.advance(59)
        assert await cache.get_json("countries") == ["Peru"]

        clock.advance(1)
        assert await cache.get_json("countries") is None

    @pytest.mark.asyncio
    async def test_returns_copies(self):
        """调用方修改返回值不影响缓存内容"""
        cache = MemoryCache("test:")
        await cache.set_json("data", {"items": [1, 2]}, ttl_seconds=60)

        first = await cache.get_json("data")
        first["items"].append(3)

        assert await cache.get_json("data") == {"items": [1, 2]}

    @pytest.mark.asyncio
    async def test_delete(self):
        cache = MemoryCache("test:")
        await cache.set_json("data", 1, ttl_seconds=60)

        await cache.delete("data")

        assert await cache.get_json("data") is None

    def test_key_prefix(self):
        assert MemoryCache("users:cache:").make_key("countries:names") == "users:cache:countries:names"


class TestRedisCache:
    """测试 Redis 缓存"""

    @pytest.mark.asyncio
    async def test_hit(self):
        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_client = AsyncMock()
            mock_client.get.return_value = json.dumps(["Peru", "Chile"])
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0", "users:cache:")
            result = await cache.get_json("countries:names")

            assert result == ["Peru", "Chile"]
            mock_client.get.assert_called_once_with("users:cache:countries:names")

    @pytest.mark.asyncio
    async def test_miss(self):
        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_client = AsyncMock()
            mock_client.get.return_value = None
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0", "users:cache:")

            assert await cache.get_json("countries:names") is None

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self):
        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_client = AsyncMock()
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0", "users:cache:")
            await cache.set_json("countries:names", ["Peru"], ttl_seconds=43200)

            mock_client.setex.assert_called_once()
            key, ttl, payload = mock_client.setex.call_args.args
            assert key == "users:cache:countries:names"
            assert ttl == 43200
            assert json.loads(payload) == ["Peru"]

    @pytest.mark.asyncio
    async def test_degrades_when_redis_down(self):
        """Redis 不可用时读取视为未命中，写入静默放弃"""
        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_client = AsyncMock()
            mock_client.get.side_effect = ConnectionError("Redis 连接失败")
            mock_client.setex.side_effect = ConnectionError("Redis 连接失败")
            mock_client.delete.side_effect = ConnectionError("Redis 连接失败")
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0", "users:cache:")

            assert await cache.get_json("countries:names") is None
            await cache.set_json("countries:names", ["Peru"], ttl_seconds=60)
            await cache.delete("countries:names")

    @pytest.mark.asyncio
    async def test_close(self):
        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_client = AsyncMock()
            mock_from_url.return_value = mock_client

            cache = RedisCache("redis://localhost:6379/0", "users:cache:")
            await cache.close()

            mock_client.aclose.assert_awaited_once()


class TestGetCache:
    """测试缓存实现选择"""

    @pytest.fixture(autouse=True)
    def clear_cache_singleton(self):
        get_cache.cache_clear()
        yield
        get_cache.cache_clear()

    @pytest.fixture
    def mock_settings(self):
        settings = MagicMock()
        settings.redis_url = None
        settings.cache_key_prefix = "users:cache:"
        return settings

    @patch("app.infra.cache.get_settings")
    def test_memory_without_redis_url(self, mock_get_settings, mock_settings):
        mock_get_settings.return_value = mock_settings

        cache = get_cache()

        assert isinstance(cache, MemoryCache)
        assert get_cache() is cache

    @patch("app.infra.cache.get_settings")
    def test_redis_with_redis_url(self, mock_get_settings, mock_settings):
        mock_settings.redis_url = "redis://localhost:6379/0"
        mock_get_settings.return_value = mock_settings

        with patch("redis.asyncio.from_url") as mock_from_url:
            mock_from_url.return_value = AsyncMock()
            cache = get_cache()

        assert isinstance(cache, RedisCache)
        assert cache.key_prefix == "users:cache:"
