"""
Redis client configuration (RQ notification queue backend)
"""

import redis
from redis.exceptions import RedisError
from elitestock.infrastructure.settings import get_settings

settings = get_settings()

# Connection pool is lazy: nothing connects until the first command.
# RQ needs raw bytes responses, so decode_responses stays off.
redis_pool = redis.ConnectionPool.from_url(settings.REDIS_URL)
redis_client = redis.Redis(connection_pool=redis_pool)


def get_redis() -> redis.Redis:
    """Get Redis client instance"""
    return redis_client


def ping_redis() -> bool:
    """Ping Redis to check connectivity"""
    try:
        return bool(redis_client.ping())
    except RedisError:
        return False
