"""
Script callables.

A ScriptFunction runs one loaded script in Redis, by SHA (cached mode) or by
resending its source (direct mode), and turns Redis failures into a
ScriptExecutionError that carries the script's name, source and SHA.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

from redis_lua_loader.db.scripts import ScriptStore
from redis_lua_loader.errors import RemoteError, ScriptExecutionError, UsageError

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[Exception], Any], Any]


class ScriptFunction:
    """
    Callable bound to one script.
    
    Two ways to call it:
        result = await fn.run(1, "key", "arg")     # raises ScriptExecutionError
        loader = fn(1, "key", "arg", callback=cb)  # schedules the call, cb(error, result)
    
    Arguments are passed to EVALSHA/EVAL unchanged, so the first one is the
    number of keys.
    """
    
    def __init__(
        self,
        name: str,
        store: ScriptStore,
        owner: Any,
        report_error: Callable[[Exception], None],
        sha: Optional[str] = None,
        source: Optional[str] = None,
        preload: bool = True,
    ):
        if preload and not sha:
            raise UsageError(f"Script name `{name}` not loaded.")
        if not preload and not source:
            raise UsageError(f"No code found for script `{name}`")
        
        self.name = name
        self.sha = sha
        self.source = source
        self.preload = preload
        self._store = store
        self._owner = owner
        self._report_error = report_error
        self._pending: Set[asyncio.Task] = set()
        self.__name__ = name
    
    def __repr__(self) -> str:
        mode = f"sha={self.sha}" if self.preload else "direct"
        return f"<ScriptFunction {self.name} {mode}>"
    
    async def run(self, *args: Any) -> Any:
        """Run the script and return Redis' reply."""
        try:
            if self.preload:
                return await self._store.invoke_by_identifier(self.sha, *args)
            return await self._store.invoke_by_source(self.source, *args)
        except RemoteError as e:
            logger.debug(f"[run] `{self.name}` failed: {e}")
            raise ScriptExecutionError(self.name, str(e), source=self.source, sha=self.sha) from e
    
    def __call__(self, *args: Any, callback: Optional[Callback] = None) -> Any:
        """
        Schedule the script on the running event loop and return the owning loader.
        
        On failure the enriched error goes to ``callback`` if one was given,
        otherwise to the loader's error listeners. On success ``callback``
        receives ``(None, reply)``.
        """
        task = asyncio.ensure_future(self._dispatch(args, callback))
        self._pending.add(task)
        task.add_done_callback(self._finished)
        return self._owner
    
    async def _dispatch(self, args: tuple, callback: Optional[Callback]) -> None:
        try:
            result = await self.run(*args)
        except ScriptExecutionError as error:
            if callback is None:
                self._report_error(error)
                return
            await _maybe_await(callback(error, None))
            return
        if callback is not None:
            await _maybe_await(callback(None, result))
    
    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            # Raised by the caller's own callback
            self._report_error(error)
    
    async def drain(self) -> None:
        """Wait for every call scheduled with ``fn(...)`` to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value
