"""
Script File Finder

Walks script directories recursively and reads every file carrying the
script extension. Listings and reads run concurrently in worker threads;
each listing and each matching file is one unit on the LoadBarrier.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, List, Set, Tuple

from redis_lua_loader.errors import DiscoveryError
from redis_lua_loader.scripts.barrier import LoadBarrier

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".lua"

ScriptHandler = Callable[["ScriptFile"], Awaitable[Any]]
ErrorHandler = Callable[[Exception], None]


@dataclass(frozen=True)
class ScriptFile:
    """A script file that was read from disk."""
    path: Path
    root: Path
    source: str
    
    @property
    def base_name(self) -> str:
        """File name without extension: ``lua/auth/check_token.lua`` -> ``check_token``."""
        return self.path.stem
    
    @property
    def relative_name(self) -> str:
        """Root-relative path without extension: ``auth/check_token``."""
        try:
            relative = self.path.relative_to(self.root)
        except ValueError:
            return self.base_name
        return relative.with_suffix("").as_posix()


def _list_directory(path: Path, extension: str) -> Tuple[List[Path], List[Path]]:
    """Split a directory's entries into sub-directories and matching script files."""
    directories = []
    scripts = []
    for entry in sorted(path.iterdir()):
        if entry.is_dir():
            directories.append(entry)
        elif entry.is_file() and entry.suffix == extension:
            scripts.append(entry)
    return directories, scripts


class ScriptFinder:
    """
    Recursive, concurrent script discovery.
    
    ``scan()`` hands every script it reads to ``on_script`` and every per-item
    failure to ``on_error``; it returns once the barrier has drained, which is
    after every ``on_script`` call has finished.
    """
    
    def __init__(self, extension: str = DEFAULT_EXTENSION):
        if not extension.startswith("."):
            extension = f".{extension}"
        self.extension = extension
        self._tasks: Set[asyncio.Task] = set()
    
    async def scan(
        self,
        roots: Iterable[Path | str],
        on_script: ScriptHandler,
        on_error: ErrorHandler,
        barrier: LoadBarrier | None = None,
    ) -> LoadBarrier:
        barrier = barrier or LoadBarrier()
        for root in roots:
            root = Path(root)
            self._spawn(barrier, on_error, self._scan_directory(
                root, root, frozenset(), barrier, on_script, on_error
            ))
        barrier.seal()
        await barrier.wait()
        return barrier
    
    def _spawn(self, barrier: LoadBarrier, on_error: ErrorHandler, coro: Awaitable[Any]) -> None:
        barrier.enqueue()
        task = asyncio.ensure_future(self._run_unit(barrier, on_error, coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
    
    async def _run_unit(self, barrier: LoadBarrier, on_error: ErrorHandler, coro: Awaitable[Any]) -> None:
        try:
            await coro
        except Exception as e:
            # Handlers report their own failures; anything else still has to surface
            logger.warning(f"Unexpected error while loading scripts: {e}")
            on_error(e)
        finally:
            barrier.complete()
    
    async def _scan_directory(
        self,
        directory: Path,
        root: Path,
        ancestors: FrozenSet[Path],
        barrier: LoadBarrier,
        on_script: ScriptHandler,
        on_error: ErrorHandler,
    ) -> None:
        logger.debug(f"[scan] listing: `{directory}`")
        try:
            resolved = await asyncio.to_thread(directory.resolve)
            if resolved in ancestors:
                logger.warning(f"Skipping directory cycle at {directory}")
                return
            directories, scripts = await asyncio.to_thread(_list_directory, directory, self.extension)
        except OSError as e:
            on_error(DiscoveryError(f"Unable to read script directory `{directory}` - {e}", directory))
            return
        
        ancestors = ancestors | {resolved}
        for path in scripts:
            self._spawn(barrier, on_error, self._read_script(path, root, on_script, on_error))
        for path in directories:
            self._spawn(barrier, on_error, self._scan_directory(
                path, root, ancestors, barrier, on_script, on_error
            ))
    
    async def _read_script(
        self,
        path: Path,
        root: Path,
        on_script: ScriptHandler,
        on_error: ErrorHandler,
    ) -> None:
        logger.debug(f"[scan] found file: `{path}`")
        try:
            source = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            on_error(DiscoveryError(f"Unable to read script `{path}` - {e}", path))
            return
        
        await on_script(ScriptFile(path=path, root=root, source=source))

