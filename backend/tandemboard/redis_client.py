# backend/tandemboard/redis_client.py

import redis.asyncio as aioredis
from redis import Redis

from .config import settings

redis_client = Redis.from_url(settings.redis_url, decode_responses=True)

# Pub/sub subscriptions for websocket clients
async_redis_client = aioredis.from_url(settings.redis_url, decode_responses=True)


# Dependency for FastAPI
def get_redis() -> Redis:
    return redis_client


def get_async_redis() -> aioredis.Redis:
    return async_redis_client
