"""
Redis access for the Lua loader.
"""

from redis_lua_loader.db.client import RedisClient, DEFAULT_REDIS_URL
from redis_lua_loader.db.scripts import ScriptStore, RedisScriptStore

__all__ = [
    "RedisClient",
    "DEFAULT_REDIS_URL",
    "ScriptStore",
    "RedisScriptStore",
]
