"""
Registration orchestrator.

Fans out over script directories, registers every script it finds with
Redis (cached mode) or keeps its source for EVAL (direct mode), records the
outcome in the ScriptRegistry and attaches a callable for it.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from redis_lua_loader.db.scripts import ScriptStore
from redis_lua_loader.errors import DiscoveryError, LuaLoaderError, RegistrationError
from redis_lua_loader.scripts.barrier import LoadBarrier
from redis_lua_loader.scripts.finder import DEFAULT_EXTENSION, ScriptFile, ScriptFinder
from redis_lua_loader.scripts.registry import ScriptEntry, ScriptRegistry
from redis_lua_loader.utils.naming import NameResolver

logger = logging.getLogger(__name__)


class RegistrationOrchestrator:
    """Loads scripts into a registry, one pass per ``load_all`` call."""
    
    def __init__(
        self,
        store: ScriptStore,
        registry: ScriptRegistry,
        resolver: NameResolver,
        wrap: Callable[[str], Callable],
        report_error: Callable[[Exception], None],
        preload: bool = True,
        extension: str = DEFAULT_EXTENSION,
        namespace: bool = False,
    ):
        self.store = store
        self.registry = registry
        self.resolver = resolver
        self.preload = preload
        self.extension = extension
        self.namespace = namespace
        self._wrap = wrap
        self._report_error = report_error
    
    def script_name(self, script: ScriptFile) -> str:
        """Name a script file is exposed under."""
        return self.resolver(script.relative_name if self.namespace else script.base_name)
    
    async def load(self, name: str, source: str, path: Optional[Path] = None) -> ScriptEntry:
        """
        Register one script and attach its callable.
        
        Raises:
            ConflictError: ``name`` is already taken in this registry
            RegistrationError: the source could not be registered (cached mode)
        """
        logger.debug(f"[load] registering: name=`{name}`")
        entry = self.registry.register(ScriptEntry(name=name, source=source, path=path))
        
        if self.preload:
            entry.mark_registering()
            try:
                sha = await self.store.register_source(source)
            except Exception as e:
                error = RegistrationError(name, str(e) or type(e).__name__, path)
                entry.mark_failed(error)
                raise error from e
            entry.mark_ready(sha)
        else:
            entry.mark_ready()
        
        self.registry.attach(name, self._wrap(name))
        return entry
    
    async def load_all(self, roots: Iterable[Path | str]) -> List[ScriptEntry]:
        """
        Load every script under ``roots``.
        
        Returns once each discovered file is either ready or reported as
        failed; per-item failures go to the error reporter and do not stop
        the pass. Returns the entries that became ready.
        """
        roots = [Path(r) for r in roots]
        logger.debug(f"[load_all] loading: dirs=`[{', '.join(str(r) for r in roots)}]`")
        
        loaded: List[ScriptEntry] = []
        
        async def on_script(script: ScriptFile) -> None:
            name = self.script_name(script)
            if not name:
                self._report_error(DiscoveryError(
                    f"Script `{script.path}` resolves to an empty name", script.path
                ))
                return
            try:
                loaded.append(await self.load(name, script.source, script.path))
            except LuaLoaderError as e:
                logger.warning(str(e))
                self._report_error(e)
        
        barrier = LoadBarrier()
        finder = ScriptFinder(self.extension)
        await finder.scan(roots, on_script, self._report_error, barrier)
        
        logger.debug(
            f"[load_all] done: {len(loaded)} loaded, {barrier.completed} units completed"
        )
        return loaded
