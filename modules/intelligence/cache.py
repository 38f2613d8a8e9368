"""
Read-through cache for intelligence results.

Results are cached per tenant (optionally per actor) for a TTL. Backends are
pluggable: an in-process memory backend with an injectable clock, and a
Redis backend for multi-worker deployments. A backend failure is never fatal:
reads fall through to a recompute and writes are skipped.

Concurrent misses for the same key each recompute; the last write wins.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError

from modules.intelligence.core.exceptions import CacheBackendError
from modules.intelligence.core.models import IntelligenceResult
from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class CacheBackend(ABC):
    """Key/value storage with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Cached value, or None if missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    async def ping(self) -> bool:
        """True if the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release connections held by the backend."""
        pass


class MemoryCacheBackend(CacheBackend):
    """
    In-process cache backend.

    Stores the value object itself, so a hit returns the identical object
    that was stored. The clock is injectable so tests can expire entries
    without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Cache expired: {key}")
                return None

            return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCacheBackend(CacheBackend):
    """
    Redis cache backend (SETEX / GET / DEL).

    Values are pydantic models stored as JSON and validated back into
    `model` on read. Without an injected client, one is built lazily from
    settings (pool size and timeouts) and closed by `close()`.
    """

    def __init__(self, client: Optional[redis.Redis] = None, model: Type[BaseModel] = IntelligenceResult):
        """
        Initialize Redis backend.

        Args:
            client: Redis client (defaults to one built from settings)
            model: Model class cached values are decoded into
        """
        self._client = client
        self._owns_client = client is None
        self.model = model

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            try:
                self._client = redis.from_url(
                    settings.redis_connection_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=settings.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT_SECONDS,
                    socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
                )
            except (redis.RedisError, ValueError) as e:
                raise CacheBackendError(f"Invalid Redis configuration: {e}") from e
            logger.info(f"Redis cache client created: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return self._client

    async def ping(self) -> bool:
        try:
            client = await self._get_client()
            await client.ping()
        except (CacheBackendError, redis.RedisError) as e:
            logger.error(f"Redis connection check failed: {e}")
            return False
        return True

    async def close(self) -> None:
        if self._client is None or not self._owns_client:
            return
        try:
            await self._client.aclose()
            logger.info("Redis connection closed")
        except redis.RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")
        finally:
            self._client = None

    async def get(self, key: str) -> Optional[Any]:
        client = await self._get_client()
        try:
            raw = await client.get(key)
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis GET {key} failed: {e}") from e

        if raw is None:
            return None

        try:
            return self.model.model_validate_json(raw)
        except ValidationError as e:
            raise CacheBackendError(f"Corrupt cache entry {key}: {e}") from e

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        client = await self._get_client()
        try:
            await client.setex(key, ttl_seconds, value.model_dump_json())
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis SETEX {key} failed: {e}") from e

    async def delete(self, key: str) -> None:
        client = await self._get_client()
        try:
            await client.delete(key)
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis DEL {key} failed: {e}") from e


class IntelligenceCache:
    """
    Read-through cache keyed by tenant and optional actor.

    Example:
        cache = IntelligenceCache(MemoryCacheBackend(), ttl_seconds=900)
        result = await cache.get_or_compute("ws-1", lambda: compute("ws-1"))
    """

    def __init__(self, backend: CacheBackend, ttl_seconds: int = 900, prefix: str = "intelligence:insights"):
        """
        Initialize cache.

        Args:
            backend: Storage backend
            ttl_seconds: Time-to-live for cached results (15 minutes)
            prefix: Key namespace
        """
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self.hits = 0
        self.misses = 0

    def key(self, tenant_id: str, actor_id: Optional[str] = None) -> str:
        if actor_id:
            return f"{self.prefix}:{tenant_id}:{actor_id}"
        return f"{self.prefix}:{tenant_id}"

    async def get(self, tenant_id: str, actor_id: Optional[str] = None) -> Optional[Any]:
        """Cached value, or None on miss or backend failure."""
        key = self.key(tenant_id, actor_id)
        try:
            value = await self.backend.get(key)
        except CacheBackendError as e:
            logger.warning(f"Cache read failed for {key}, recomputing: {e}")
            value = None

        if value is None:
            self.misses += 1
            return None

        self.hits += 1
        logger.debug(f"Cache hit: {key}")
        return value

    async def set(
        self,
        tenant_id: str,
        value: Any,
        actor_id: Optional[str] = None,
        ttl_seconds: Optional[int] = None
    ) -> None:
        """Store a value; backend failures are logged and skipped."""
        key = self.key(tenant_id, actor_id)
        ttl = ttl_seconds or self.ttl_seconds
        try:
            await self.backend.set(key, value, ttl)
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
        except CacheBackendError as e:
            logger.warning(f"Cache write failed for {key}, skipping: {e}")

    async def get_or_compute(
        self,
        tenant_id: str,
        compute: Callable[[], Awaitable[Any]],
        actor_id: Optional[str] = None,
        ttl_seconds: Optional[int] = None
    ) -> Any:
        """
        Get value from cache or compute and store it on a miss.

        Exceptions from `compute` propagate and nothing is cached.
        """
        cached = await self.get(tenant_id, actor_id)
        if cached is not None:
            return cached

        value = await compute()
        await self.set(tenant_id, value, actor_id, ttl_seconds)
        return value

    async def invalidate(self, tenant_id: str, actor_id: Optional[str] = None) -> None:
        """Force-expire a cached result."""
        key = self.key(tenant_id, actor_id)
        try:
            await self.backend.delete(key)
            logger.debug(f"Cache invalidated: {key}")
        except CacheBackendError as e:
            logger.warning(f"Cache invalidation failed for {key}: {e}")

    async def ping(self) -> bool:
        return await self.backend.ping()

    async def close(self) -> None:
        await self.backend.close()

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate_percent": round(hit_rate, 2),
            "total_requests": total_requests,
        }


def create_cache(ttl_seconds: Optional[int] = None) -> Optional[IntelligenceCache]:
    """
    Build the cache described by application settings.

    Returns:
        IntelligenceCache, or None when INSIGHTS_CACHE_ENABLED is off
    """
    if not settings.INSIGHTS_CACHE_ENABLED:
        logger.info("Intelligence cache disabled")
        return None

    if settings.INSIGHTS_CACHE_BACKEND == "redis":
        backend: CacheBackend = RedisCacheBackend()
    else:
        backend = MemoryCacheBackend()

    return IntelligenceCache(
        backend,
        ttl_seconds=ttl_seconds or settings.INSIGHTS_CACHE_TTL_SECONDS,
        prefix=settings.INSIGHTS_CACHE_PREFIX,
    )
