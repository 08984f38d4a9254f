import redis.asyncio as redis
from loguru import logger

from recommender.core.config import settings


class StoreUnavailable(Exception):
    """Raised by ``read`` when the key cannot be fetched at all."""


class RedisService:
    """
    Thin key-value facade over Redis.

    ``read`` separates "no value" (``None``) from "store unreachable" (``StoreUnavailable``) so
    callers can log the two cases differently; writes report success as a bool.
    """

    def __init__(self, url: str | None = None) -> None:
        self._url = url or settings.REDIS_URL
        self._client: redis.Redis | None = None
        if not self._url:
            logger.warning("REDIS_URL is not set. Redis operations will fail until configured.")

    async def get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating Redis client for RedisService")
            self._client = redis.from_url(
                self._url,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                health_check_interval=30,
                socket_keepalive=True,
            )
        return self._client

    async def read(self, key: str) -> str | None:
        """Get a value by key.

        Args:
            key: The key to retrieve

        Returns:
            The stored string, or None if the key does not exist

        Raises:
            StoreUnavailable: Redis could not be reached
        """
        try:
            client = await self.get_client()
            return await client.get(key)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to get key '{key}' from Redis: {exc}")
            raise StoreUnavailable(str(exc)) from exc

    async def write(self, key: str, value: str) -> bool:
        """Replace the value stored under ``key``.

        Returns:
            True if successful, False otherwise
        """
        try:
            client = await self.get_client()
            result = await client.set(key, value)
            return bool(result)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to set key '{key}' in Redis: {exc}")
            return False

    async def close(self) -> None:
        """Close and disconnect the Redis client"""
        if self._client is not None:
            try:
                await self._client.aclose()
                logger.info("RedisService client closed")
            except (redis.RedisError, OSError) as exc:
                logger.warning(f"Failed to close RedisService client: {exc}")
            finally:
                self._client = None


redis_service = RedisService()
