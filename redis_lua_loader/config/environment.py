"""
Environment Configuration

Environment variable lookups for the loader and its CLI.
"""

import os
from pathlib import Path
from typing import List, Optional

from redis_lua_loader.db.client import DEFAULT_REDIS_URL

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def get_redis_url() -> str:
    """Redis URL from REDIS_URL, defaulting to a local server."""
    return os.environ.get("REDIS_URL") or DEFAULT_REDIS_URL


def get_script_dirs() -> List[Path]:
    """Script directories from LUA_LOADER_SRC (os.pathsep separated).
    
    Falls back to ./lua when unset.
    """
    raw = os.environ.get("LUA_LOADER_SRC")
    if not raw:
        return [Path.cwd() / "lua"]
    return [Path(os.path.expanduser(p)) for p in raw.split(os.pathsep) if p.strip()]


def get_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable.
    
    Raises ValueError for values that are not recognisably true or false.
    """
    raw: Optional[str] = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")
