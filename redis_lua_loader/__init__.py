"""
Redis Lua Loader
Loads Lua scripts from directories into Redis and exposes them as callables.
"""

__version__ = "0.3.0"
__package_name__ = "redis-lua-loader"

from redis_lua_loader.errors import (
    LuaLoaderError,
    DiscoveryError,
    ConflictError,
    RegistrationError,
    ScriptExecutionError,
    UsageError,
    RemoteError,
)
from redis_lua_loader.loader import LuaLoader

__all__ = [
    "__version__",
    "__package_name__",
    "LuaLoader",
    # Errors
    "LuaLoaderError",
    "DiscoveryError",
    "ConflictError",
    "RegistrationError",
    "ScriptExecutionError",
    "UsageError",
    "RemoteError",
]
