"""Redis-backed cache for transcription job ids and model completions."""

from collections.abc import Callable
from typing import TypeVar

import redis

from call_scorecard.exceptions import CacheServiceError
from call_scorecard.logging import setup_logging

from .interfaces import CacheService

logger = setup_logging()

T = TypeVar("T")


class RedisCacheService(CacheService):
    """
    Cache service implementation using Redis.

    Entries expire after ``ttl_seconds``. An expired job id means the audio
    is submitted again and an expired completion means the model is called
    again.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int):
        self._client = client
        self._ttl_seconds = ttl_seconds

    def get(self, key: str) -> str | None:
        value = self._run("get", key, lambda: self._client.get(key))
        logger.info("Cache lookup", extra={"cache_key": key, "hit": value is not None})
        return value

    def set(self, key: str, value: str) -> None:
        self._run("set", key, lambda: self._client.set(key, value, ex=self._ttl_seconds))
        logger.info("Cache set", extra={"cache_key": key, "ttl": self._ttl_seconds})

    def _run(self, operation: str, key: str, command: Callable[[], T]) -> T:
        """Runs one Redis command, raising CacheServiceError on Redis failures."""
        try:
            return command()
        except redis.RedisError as e:
            logger.exception(
                "Redis command failed", extra={"cache_key": key, "operation": operation}
            )
            raise CacheServiceError(key, operation, cause=e) from e
