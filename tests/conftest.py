"""
Shared pytest fixtures for Redis Lua Loader tests

Provides an in-memory stand-in for Redis' scripting commands and helpers
for laying out script directories.
"""

import asyncio
import hashlib
import sys
from pathlib import Path
import pytest
from unittest.mock import Mock
from typing import Any, Dict, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from redis_lua_loader.db.scripts import ScriptStore
from redis_lua_loader.errors import RemoteError


# ============================================================================
# Mock Helper Classes
# ============================================================================

class FakeScriptStore(ScriptStore):
    """
    In-memory ScriptStore.

    SCRIPT LOAD returns the real SHA1 of the source, like Redis does.
    Scripts "run" by returning the list of arguments they were called with,
    unless their source contains ``error(`` in which case they fail.

    Usage:
        store = FakeScriptStore()
        store.reject_source("broken")           # SCRIPT LOAD fails for sources containing "broken"
        store.connected.clear()                 # hold wait_connected() until set()
    """

    def __init__(self):
        self.scripts: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.loads: List[str] = []
        self.killed = 0
        self.connect_error: Optional[str] = None
        self.connected = asyncio.Event()
        self.connected.set()
        self._rejected: List[str] = []

    def reject_source(self, marker: str) -> None:
        self._rejected.append(marker)

    async def wait_connected(self) -> None:
        await self.connected.wait()
        if self.connect_error:
            raise RemoteError(self.connect_error)

    async def register_source(self, source: str) -> str:
        await asyncio.sleep(0)
        self.loads.append(source)
        for marker in self._rejected:
            if marker in source:
                raise RemoteError(f"ERR Error compiling script (new function): {marker}")
        sha = hashlib.sha1(source.encode("utf-8")).hexdigest()
        self.scripts[sha] = source
        return sha

    async def invoke_by_identifier(self, sha: str, *args: Any) -> Any:
        self.calls.append(("EVALSHA", sha) + args)
        source = self.scripts.get(sha)
        if source is None:
            raise RemoteError("NOSCRIPT No matching script. Please use EVAL.")
        return self._run(source, args)

    async def invoke_by_source(self, source: str, *args: Any) -> Any:
        self.calls.append(("EVAL", source) + args)
        return self._run(source, args)

    async def kill_running_script(self) -> Any:
        self.killed += 1
        return True

    def _run(self, source: str, args: tuple) -> Any:
        if "error(" in source:
            raise RemoteError("ERR user_script:1: Script attempted to access nonexistent global variable")
        return list(args)


def _write_scripts(base: Path, files: Dict[str, str]) -> Path:
    """
    Create script files under ``base``.

    Usage:
        write_scripts(tmp_path / "lua", {"return_one.lua": "return 1", "sub/two.lua": "return 2"})
    """
    base.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return base


# ============================================================================
# Base Fixtures
# ============================================================================

@pytest.fixture
def store():
    """In-memory script store."""
    return FakeScriptStore()


@pytest.fixture
def logger():
    """
    Standard mock logger for all tests.
    """
    from redis_lua_loader.utils.logger import Logger
    logger = Mock(spec=Logger)
    logger.child.return_value = logger
    return logger


@pytest.fixture
def lua_dir(tmp_path):
    """A script directory like the ones shipped with most projects."""
    return _write_scripts(tmp_path / "lua", {
        "test.lua": "return 'test'",
        "return_one.lua": "return 1",
        "bad-json.lua": "return cjson.decode(ARGV[1])",
        "README.md": "not a script",
    })


@pytest.fixture
def lua2_dir(tmp_path):
    """Second directory with a nested sub-directory."""
    return _write_scripts(tmp_path / "lua2", {
        "incr_by.lua": "return redis.call('INCRBY', KEYS[1], ARGV[1])",
        "nested/get_key.lua": "return redis.call('GET', KEYS[1])",
    })


@pytest.fixture
def errors():
    """List to collect loader errors in."""
    return []


@pytest.fixture
def write_scripts():
    """
    Helper to lay out script files.
    
    Usage:
        def test_something(tmp_path, write_scripts):
            root = write_scripts(tmp_path / "lua", {"return_one.lua": "return 1"})
    """
    return _write_scripts
