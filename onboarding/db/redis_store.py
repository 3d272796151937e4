"""Thin Redis client wrapper used as the submission store."""
import logging
from typing import Optional

import redis

logger = logging.getLogger(__name__)


class RedisStore:
    """Redis client wrapper with the handful of commands the DAO needs."""

    def __init__(self, client: redis.Redis):
        """Initialize the store.

        Args:
            client: redis.Redis created with decode_responses=True
        """
        self.client = client

        try:
            self.ping()
            logger.info("[RedisStore] Connected to Redis")
        except redis.ConnectionError as e:
            logger.error(f"[RedisStore] Could not connect to Redis: {e}")
            raise

    @classmethod
    def from_settings(cls, host: str, port: int, password: str = "", db: int = 0) -> "RedisStore":
        return cls(
            redis.Redis(
                host=host,
                port=port,
                password=password or None,
                db=db,
                decode_responses=True,
            )
        )

    def ping(self) -> bool:
        return self.client.ping()

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def hgetall(self, key: str) -> dict[str, str]:
        return self.client.hgetall(key)

    def zrevrange(self, key: str, start: int, end: int) -> list[str]:
        return self.client.zrevrange(key, start, end)

    def zcard(self, key: str) -> int:
        return self.client.zcard(key)

    def rpush(self, key: str, *values: str) -> int:
        return self.client.rpush(key, *values)

    def lpop(self, key: str, count: int) -> list[str]:
        """Pop up to count items from the head of a list."""
        items = self.client.lpop(key, count)
        return items or []

    def pipeline(self, transaction: bool = True):
        """Return a pipeline; with transaction=True writes run in MULTI/EXEC."""
        return self.client.pipeline(transaction=transaction)

    def close(self) -> None:
        self.client.close()
