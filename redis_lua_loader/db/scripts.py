"""
Script store.

The only Redis operations the loader needs: register a script source, run a
script by SHA or by source, kill a running script, and check the connection.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from redis.exceptions import RedisError

from redis_lua_loader.db.client import RedisClient
from redis_lua_loader.errors import RemoteError
from redis_lua_loader.utils.logger import Logger


class ScriptStore(ABC):
    """Boundary to the remote scripting subsystem."""
    
    @abstractmethod
    async def wait_connected(self) -> None:
        """Return once the store is reachable; raise RemoteError otherwise."""
    
    @abstractmethod
    async def register_source(self, source: str) -> str:
        """Register ``source`` and return its identifier."""
    
    @abstractmethod
    async def invoke_by_identifier(self, sha: str, *args: Any) -> Any:
        """Run a registered script."""
    
    @abstractmethod
    async def invoke_by_source(self, source: str, *args: Any) -> Any:
        """Run a script by sending its full source."""
    
    @abstractmethod
    async def kill_running_script(self) -> Any:
        """Stop the script currently running on the server."""


def _script_args(args: tuple) -> tuple:
    # EVAL/EVALSHA always need numkeys; a bare call means no keys
    return args if args else (0,)


class RedisScriptStore(ScriptStore):
    """ScriptStore backed by ``redis.asyncio`` (SCRIPT LOAD / EVALSHA / EVAL)."""
    
    def __init__(self, client, logger: Optional[Logger] = None):
        self._client = client
        self.logger = logger or Logger("redis-lua-loader.store")
    
    @property
    def client(self):
        if isinstance(self._client, RedisClient):
            return self._client.client
        return self._client
    
    async def wait_connected(self) -> None:
        try:
            await self.client.ping()
        except RedisError as e:
            self.logger.error(f"Redis not reachable: {e}")
            raise RemoteError(str(e)) from e
        self.logger.debug("Redis connection ready")
    
    async def register_source(self, source: str) -> str:
        try:
            sha = await self.client.script_load(source)
        except RedisError as e:
            raise RemoteError(str(e)) from e
        if isinstance(sha, bytes):
            sha = sha.decode("ascii")
        return sha
    
    async def invoke_by_identifier(self, sha: str, *args: Any) -> Any:
        try:
            return await self.client.evalsha(sha, *_script_args(args))
        except RedisError as e:
            raise RemoteError(str(e)) from e
    
    async def invoke_by_source(self, source: str, *args: Any) -> Any:
        try:
            return await self.client.eval(source, *_script_args(args))
        except RedisError as e:
            raise RemoteError(str(e)) from e
    
    async def kill_running_script(self) -> Any:
        try:
            return await self.client.script_kill()
        except RedisError as e:
            raise RemoteError(str(e)) from e
