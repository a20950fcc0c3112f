"""
Lua Loader

Loads Lua scripts from one or more directories into Redis and exposes each
one as a callable:

    loader = LuaLoader(redis_client, src=["lua", "vendor/lua"])
    await loader.start()
    await loader.wait_ready()

    reply = await loader.get("returnOne").run(0)

Signals:
    ready: the Redis connection answered and every script was either loaded
           or reported as failed (fires once)
    error: a file could not be read, a name was taken twice, Redis rejected a
           script, or a script call failed with no callback (fires any number
           of times)
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple

from redis_lua_loader.config.settings import LoaderConfig
from redis_lua_loader.db.client import RedisClient
from redis_lua_loader.db.scripts import RedisScriptStore, ScriptStore
from redis_lua_loader.errors import RemoteError, UsageError
from redis_lua_loader.execution.invocation import ScriptFunction
from redis_lua_loader.execution.signals import ErrorChannel, ReadinessGate
from redis_lua_loader.scripts.orchestrator import RegistrationOrchestrator
from redis_lua_loader.scripts.registry import ScriptEntry, ScriptRegistry
from redis_lua_loader.utils.logger import Logger
from redis_lua_loader.utils.naming import NameResolver


class LuaLoader:
    """
    Lua script loader and function wrapper.

    Args:
        client: a ``redis.asyncio.Redis`` client, a RedisClient, or any
            ScriptStore implementation
        src: script directory or list of directories
        namer: file name -> script name strategy (default camelCase);
            ``iterator`` is accepted as an alias
        preload: True registers scripts with SCRIPT LOAD and calls them with
            EVALSHA; False resends the source with EVAL on every call
        extension: script file extension
        namespace: name scripts by their directory-relative path instead of
            their file name alone
    """

    def __init__(
        self,
        client: Any = None,
        src: str | Path | Iterable[str | Path] | None = None,
        *,
        namer: NameResolver | Callable[[str], str] | None = None,
        iterator: Callable[[str], str] | None = None,
        preload: bool = True,
        extension: str | None = None,
        namespace: bool = False,
        logger: Optional[Logger] = None,
        config: Optional[LoaderConfig] = None,
    ):
        if config is None:
            if src is not None and not isinstance(src, (str, Path)):
                src = list(src)
            config = LoaderConfig.from_options({
                "src": src,
                "preload": preload,
                "extension": extension,
                "namespace": namespace,
            })
        self.config = config
        self.logger = logger or Logger("redis-lua-loader", level=config.log_level)

        # a client built here is closed by close(); one passed in belongs to the caller
        self._owned_client: Optional[RedisClient] = None
        if isinstance(client, ScriptStore):
            self.store = client
        else:
            if client is None:
                client = self._owned_client = RedisClient(config.redis_url)
            self.store = RedisScriptStore(client, logger=self.logger.child("store"))

        self.namer = NameResolver.of(namer if namer is not None else iterator)
        self.dirs: List[Path] = list(config.src)
        self.preload = config.preload

        self.registry = ScriptRegistry()
        self._errors = ErrorChannel(self.logger)
        self._gate = ReadinessGate()
        self._orchestrator = RegistrationOrchestrator(
            store=self.store,
            registry=self.registry,
            resolver=self.namer,
            wrap=self.script_wrap,
            report_error=self._errors.emit,
            preload=config.preload,
            extension=config.extension,
            namespace=config.namespace,
        )
        self._started = False

    def __repr__(self) -> str:
        mode = "cached" if self.preload else "direct"
        return f"<LuaLoader {mode} scripts={len(self.registry)} ready={self.is_ready}>"

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> "LuaLoader":
        """
        Wait for Redis and load every configured directory, concurrently.

        Returns once both have finished. Check ``is_ready`` or listen for
        errors to know how it went; a failed connection leaves the loader
        not ready.
        """
        if self._started:
            raise UsageError("Loader already started")
        self._started = True
        self._gate.begin()
        await asyncio.gather(self._connect(), self._load())
        return self

    async def _connect(self) -> None:
        try:
            await self.store.wait_connected()
        except RemoteError as e:
            self._errors.emit(e)
            return
        self._gate.mark_store_connected()

    async def _load(self) -> None:
        await self.script_load_all(self.dirs)
        self.logger.debug(f"[init] {len(self.registry)} scripts loaded")
        self._gate.mark_scripts_loaded()
        if self._gate.is_ready:
            self.logger.debug("[init] ready")

    async def close(self) -> None:
        """Close the Redis connection if this loader opened it."""
        if self._owned_client is not None:
            await self._owned_client.close()

    @property
    def is_ready(self) -> bool:
        return self._gate.is_ready

    async def wait_ready(self) -> "LuaLoader":
        """Block until the ready signal has fired."""
        await self._gate.wait()
        return self

    def on_ready(self, callback: Callable[[], None]) -> "LuaLoader":
        """Call ``callback`` once when the loader becomes ready."""
        self._gate.on_ready(callback)
        return self

    def on_error(self, callback: Callable[[Exception], None]) -> Callable[[], None]:
        """Subscribe to loader errors; returns an unsubscribe function."""
        return self._errors.subscribe(callback)

    # =========================================================================
    # Loading
    # =========================================================================

    async def script_load(self, name: str, source: str) -> Tuple[Optional[str], ScriptFunction]:
        """
        Load a single script into Redis, saving its SHA, and attach its callable.

        Returns ``(sha, function)``; sha is None in direct mode.

        Raises:
            ConflictError: a script with this name is already loaded
            RegistrationError: Redis rejected the script
        """
        entry = await self._orchestrator.load(name, source)
        return entry.sha, self.get(name)

    async def script_load_all(self, dirs: str | Path | Iterable[str | Path]) -> List[ScriptEntry]:
        """
        Load every script found (recursively) under ``dirs``.

        Per-script failures are reported to the error listeners and do not
        stop the others. Returns the entries that were loaded.
        """
        if isinstance(dirs, (str, Path)):
            dirs = [dirs]
        return await self._orchestrator.load_all(dirs)

    async def script_kill(self) -> "LuaLoader":
        """Shortcut to Redis' SCRIPT KILL."""
        await self.store.kill_running_script()
        return self

    # =========================================================================
    # Lookup
    # =========================================================================

    def script_wrap(self, name: str) -> ScriptFunction:
        """
        Create a callable for a loaded script.

        Raises:
            UsageError: the script was never loaded
        """
        self.logger.debug(f"[scriptWrap] wrapping: name=`{name}`")
        entry = self.registry.get(name)
        return ScriptFunction(
            name,
            store=self.store,
            owner=self,
            report_error=self._errors.emit,
            sha=entry.sha if entry else None,
            source=entry.source if entry else None,
            preload=self.preload,
        )

    def get(self, name: str) -> ScriptFunction:
        """
        The callable attached to a loaded script.

        Raises:
            UsageError: the script was never loaded
        """
        function = self.registry.function(name)
        if function is None:
            raise UsageError(f"Script name `{name}` not loaded.")
        return function

    __getitem__ = get

    def sha(self, name: str) -> Optional[str]:
        """Cached SHA for a script; None if unknown or in direct mode."""
        return self.registry.sha(name)

    def names(self) -> List[str]:
        return self.registry.names()

    def entries(self) -> List[ScriptEntry]:
        """Every discovered script, failed ones included."""
        return self.registry.entries()

    def __contains__(self, name: object) -> bool:
        return name in self.registry

    def __len__(self) -> int:
        return len(self.registry)
