"""
读穿缓存模块

为第三方查询结果（如国家列表）提供带 TTL 的缓存：
- MemoryCache: 进程内缓存，适用于单实例部署
- RedisCache: Redis 缓存，多实例共享；Redis 不可用时降级为未命中（不影响业务逻辑）

get_cache() 根据 settings.redis_url 选择实现。

值统一序列化为 JSON 字符串存储，读取时反序列化，调用方拿到的是独立副本。
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from functools import lru_cache
from typing import Any

import redis.asyncio as aioredis

from app.config import get_settings

logger = logging.getLogger(__name__)


class BaseCache(ABC):
    """缓存基类"""

    def __init__(self, key_prefix: str) -> None:
        self.key_prefix = key_prefix

    def make_key(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    @abstractmethod
    async def get_json(self, name: str) -> Any | None:
        """读取缓存，不存在或已过期返回 None"""

    @abstractmethod
    async def set_json(self, name: str, value: Any, ttl_seconds: int) -> None:
        """写入缓存，ttl_seconds 后过期"""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """删除缓存"""

    async def close(self) -> None:
        pass


class MemoryCache(BaseCache):
    """
    进程内 TTL 缓存

    使用单调时钟计算过期时间，不受系统时间调整影响。
    过期条目在下次读取时清除。
    """

    def __init__(self, key_prefix: str, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(key_prefix)
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get_json(self, name: str) -> Any | None:
        key = self.make_key(name)
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, payload = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return json.loads(payload)

    async def set_json(self, name: str, value: Any, ttl_seconds: int) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        self._entries[self.make_key(name)] = (self._clock() + ttl_seconds, payload)

    async def delete(self, name: str) -> None:
        self._entries.pop(self.make_key(name), None)


class RedisCache(BaseCache):
    """
    Redis 缓存

    所有 Redis 异常只记录告警：读取视为未命中，写入直接放弃。
    """

    def __init__(self, redis_url: str, key_prefix: str) -> None:
        super().__init__(key_prefix)
        self._client = aioredis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )

    async def get_json(self, name: str) -> Any | None:
        key = self.make_key(name)
        try:
            cached = await self._client.get(key)
        except Exception as e:
            logger.warning(f"读取 Redis 缓存失败: key={key}, error={e}")
            return None

        if not cached:
            return None
        logger.debug(f"缓存命中: key={key}")
        return json.loads(cached)

    async def set_json(self, name: str, value: Any, ttl_seconds: int) -> None:
        key = self.make_key(name)
        try:
            await self._client.setex(key, ttl_seconds, json.dumps(value, ensure_ascii=False))
        except Exception as e:
            logger.warning(f"写入 Redis 缓存失败: key={key}, error={e}")

    async def delete(self, name: str) -> None:
        key = self.make_key(name)
        try:
            await self._client.delete(key)
        except Exception as e:
            logger.warning(f"删除 Redis 缓存失败: key={key}, error={e}")

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis 连接已关闭")


@lru_cache(maxsize=1)
def get_cache() -> BaseCache:
    """获取缓存单例：配置了 redis_url 用 Redis，否则用进程内缓存"""
    settings = get_settings()

    if settings.redis_url:
        logger.info("使用 Redis 缓存")
        return RedisCache(settings.redis_url, settings.cache_key_prefix)

    logger.info("使用进程内缓存（单实例模式）")
    return MemoryCache(settings.cache_key_prefix)
