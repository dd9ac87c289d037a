import json
import logging
import uuid

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)

PUBLICATION_LIST_KEY = "publications:list"
USER_LIST_KEY = "users:list"


def publication_detail_key(publication_id: uuid.UUID) -> str:
    return f"publications:detail:{publication_id}"


class CacheManager:
    """
    Cache-aside store backed by Redis.

    Every public method tolerates a missing or failing Redis: reads report
    a miss and writes are skipped, so requests never fail because of the
    cache.  Entries are dropped on every write that affects them; TTLs only
    bound how long an entry can live when nothing writes.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss or error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """Store *value* under *key* with an optional TTL (seconds)."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        if not self._redis or not keys:
            return
        try:
            await self._redis.delete(*keys)
            logger.debug("Cache invalidated %s", ", ".join(keys))
        except Exception as exc:
            logger.debug("Cache DELETE error for keys=%r: %s", keys, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation helpers
    # ------------------------------------------------------------------

    async def invalidate_publication(self, publication_id: uuid.UUID | None = None) -> None:
        """
        Drop the publication list and, when *publication_id* is given, that
        publication's detail entry.  Called after any write that changes a
        publication or its comments, likes, shares or media.
        """
        keys = [PUBLICATION_LIST_KEY]
        if publication_id is not None:
            keys.append(publication_detail_key(publication_id))
        await self.delete(*keys)

    async def invalidate_publications(self, publication_ids) -> None:
        """Drop the publication list and the detail entry of every id given."""
        await self.delete(PUBLICATION_LIST_KEY, *(publication_detail_key(i) for i in publication_ids))

    async def invalidate_users(self) -> None:
        """Drop the user listing after a registration or profile edit."""
        await self.delete(USER_LIST_KEY)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Snapshot of hit/miss counters for the metrics endpoint."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
