"""Storage client package."""
from onboarding.db.redis_store import RedisStore

__all__ = ["RedisStore"]
