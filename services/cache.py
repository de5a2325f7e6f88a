import json
import logging

from redis.exceptions import RedisError

from models.mapping import UrlMapping

logger = logging.getLogger(__name__)


class UrlCache:
    """Read-through cache of short code -> (id, original URL) in Redis.

    Click counts live only in the database. Any Redis failure is logged and
    treated as a miss.
    """

    def __init__(self, redis, key_prefix: str = "short:", ttl_seconds: int = 3600):
        self._redis = redis
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    async def get(self, short_code: str) -> dict | None:
        try:
            cached = await self._redis.get(self._key(short_code))
        except RedisError:
            logger.warning("Cache read failed for %s", short_code, exc_info=True)
            return None
        if not cached:
            return None
        try:
            if isinstance(cached, (bytes, bytearray)):
                cached = cached.decode("utf-8")
            payload = json.loads(cached)
            return {"id": payload["id"], "original_url": payload["original_url"]}
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable cache entry for %s", short_code)
            await self.delete(short_code)
            return None

    async def set(self, mapping: UrlMapping) -> None:
        payload = json.dumps({"id": mapping.id, "original_url": mapping.original_url})
        try:
            if self._ttl_seconds > 0:
                await self._redis.set(self._key(mapping.short_code), payload, ex=self._ttl_seconds)
            else:
                await self._redis.set(self._key(mapping.short_code), payload)
        except RedisError:
            logger.warning("Cache write failed for %s", mapping.short_code, exc_info=True)

    async def delete(self, short_code: str) -> None:
        try:
            await self._redis.delete(self._key(short_code))
        except RedisError:
            logger.warning("Cache eviction failed for %s", short_code, exc_info=True)

    async def close(self) -> None:
        await self._redis.aclose()

    def _key(self, short_code: str) -> str:
        return f"{self._key_prefix}{short_code}"
