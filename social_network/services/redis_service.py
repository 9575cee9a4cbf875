# social_network/services/redis_service.py
from typing import Optional
from redis.asyncio import Redis
from social_network.config import settings

class RedisService:
    def __init__(self):
        self.redis: Redis = Redis.from_url(settings.redis_url, decode_responses=True)

    async def set(self, key: str, value: str, expire: Optional[int] = None):
        """Set a key with optional expiration in seconds"""
        await self.redis.set(name=key, value=value, ex=expire)

    async def setex(self, key: str, expire: int, value: str):
        """Set a key that expires after ``expire`` seconds"""
        await self.redis.setex(key, expire, value)

    async def get(self, key: str):
        """Get the value of a key"""
        return await self.redis.get(key)

    async def delete(self, key: str):
        """Delete a key"""
        await self.redis.delete(key)

    async def close(self):
        """Close the Redis connection"""
        await self.redis.aclose()
