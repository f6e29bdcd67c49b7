import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Union

import redis.asyncio as redis
from fastapi.encoders import jsonable_encoder
from loguru import logger
from redis.exceptions import RedisError

from .config import (
    CACHE_ENABLED,
    CACHE_TIMEOUT_SECONDS,
    CACHE_TTL_SECONDS,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_URL,
)
from .errors import CacheUnavailable

_BACKEND_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class Cache:
    """Read-through, write-invalidate cache over an optional redis backend.

    Connection is attempted once, at startup. When the backend is missing or
    unreachable every read computes and every invalidation is a no-op; no
    cache problem ever reaches the caller.
    """

    def __init__(self, client=None, ttl: int = CACHE_TTL_SECONDS):
        self.client = client
        self.ttl = ttl
        self.available = False

    async def connect(self) -> bool:
        if self.client is None:
            logger.info("Cache backend not configured, caching disabled")
            return False
        try:
            await self.client.ping()
        except _BACKEND_ERRORS as e:
            logger.warning(f"Cache backend unreachable, continuing without cache: {e}")
            self.available = False
            return False
        self.available = True
        logger.info("Cache backend connected")
        return True

    async def close(self) -> None:
        if self.client is None:
            return
        try:
            await self.client.aclose()
        except _BACKEND_ERRORS as e:
            logger.warning(f"Error closing cache backend: {e}")
        self.available = False

    async def _call(self, operation: str, *args, **kwargs):
        if not self.available:
            raise CacheUnavailable("cache backend not connected")
        try:
            return await getattr(self.client, operation)(*args, **kwargs)
        except _BACKEND_ERRORS as e:
            raise CacheUnavailable(f"{operation} failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._call("get", key)
        except CacheUnavailable as e:
            if self.available:
                logger.warning(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: str) -> None:
        try:
            await self._call("set", key, value, ex=self.ttl)
        except CacheUnavailable as e:
            if self.available:
                logger.warning(f"Cache set error for {key}: {e}")

    async def read(self, key: str, compute: Callable[[], Union[Any, Awaitable[Any]]]) -> Any:
        """Return the cached value for key, computing and storing it on a miss.

        Values go through JSON on both paths, so a hit and a miss return the
        same shape.
        """
        cached = await self.get(key)
        if cached is not None:
            try:
                value = json.loads(cached)
            except json.JSONDecodeError as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            else:
                logger.debug(f"Cache hit: {key}")
                return value

        value = compute()
        if inspect.isawaitable(value):
            value = await value
        payload = json.dumps(jsonable_encoder(value))
        await self.set(key, payload)
        return json.loads(payload)

    async def invalidate(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._call("delete", *keys)
        except CacheUnavailable as e:
            if self.available:
                logger.warning(f"Cache delete error for {', '.join(keys)}: {e}")


def create_cache() -> Cache:
    """Build the cache from config; the client is not contacted until connect()."""
    if not CACHE_ENABLED:
        return Cache(None)

    options = dict(
        socket_timeout=CACHE_TIMEOUT_SECONDS,
        socket_connect_timeout=CACHE_TIMEOUT_SECONDS,
        decode_responses=True,
    )
    if REDIS_URL:
        client = redis.from_url(REDIS_URL, **options)
    else:
        client = redis.Redis(host=REDIS_HOST, port=REDIS_PORT, password=REDIS_PASSWORD, **options)
    return Cache(client)
