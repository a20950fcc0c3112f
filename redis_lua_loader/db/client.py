"""
Redis client wrapper for the Lua loader.
"""

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env file
load_dotenv()

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RedisClient:
    """Wrapper around an asyncio Redis client with lazy initialization."""
    
    def __init__(self, url: Optional[str] = None):
        self._url = url or os.getenv("REDIS_URL") or DEFAULT_REDIS_URL
        self._client = None
    
    @property
    def url(self) -> str:
        return self._url
    
    @property
    def client(self):
        """Lazily create the redis.asyncio client."""
        if self._client is None:
            from redis.asyncio import Redis
            self._client = Redis.from_url(self._url, decode_responses=True)
        return self._client
    
    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
