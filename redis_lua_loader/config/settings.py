"""
Settings
Configuration management for the Lua loader.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv
from jsonschema import ValidationError, validate

from redis_lua_loader.config.environment import get_flag, get_redis_url, get_script_dirs
from redis_lua_loader.errors import UsageError
from redis_lua_loader.scripts.finder import DEFAULT_EXTENSION


# JSON Schema for the plain options mapping accepted by LuaLoader.
# Callables (namer / iterator) and clients are checked separately.
OPTIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "src": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {"type": "array", "items": {"type": "string", "minLength": 1}},
            ]
        },
        "preload": {"type": "boolean"},
        "extension": {"type": "string", "pattern": r"^\.?[A-Za-z0-9_]+$"},
        "namespace": {"type": "boolean"},
        "redis_url": {"type": "string", "minLength": 1},
        "log_level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR", "debug", "info", "warning", "error"]},
    },
    "additionalProperties": False,
}


@dataclass
class LoaderConfig:
    """Loader configuration."""
    src: List[Path] = field(default_factory=list)
    preload: bool = True
    extension: str = DEFAULT_EXTENSION
    namespace: bool = False
    redis_url: str = ""  # Set in __post_init__
    log_level: str = "DEBUG"
    
    def __post_init__(self):
        if not self.redis_url:
            self.redis_url = get_redis_url()
        if not self.extension.startswith("."):
            self.extension = f".{self.extension}"
        self.src = [Path(p) for p in self.src]
    
    @property
    def is_direct(self) -> bool:
        return not self.preload
    
    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "LoaderConfig":
        """
        Build a config from a plain options mapping.
        
        ``src`` may be a single directory or a list of them. Path objects are
        accepted wherever strings are.
        
        Raises:
            UsageError: an option is unknown or has the wrong type
        """
        data = {k: v for k, v in dict(options or {}).items() if v is not None}
        if "src" in data:
            src = data["src"]
            if isinstance(src, (str, Path)):
                src = [src]
            if isinstance(src, (list, tuple)):
                data["src"] = [str(p) if isinstance(p, Path) else p for p in src]
        
        try:
            validate(instance=data, schema=OPTIONS_SCHEMA)
        except ValidationError as e:
            where = ".".join(str(p) for p in e.path) or "options"
            raise UsageError(f"Invalid loader option `{where}`: {e.message}") from e
        
        return cls(**data)


class ConfigManager:
    """Configuration manager - loads and provides config."""
    
    _instance: Optional["ConfigManager"] = None
    
    def __init__(self):
        self._config: Optional[LoaderConfig] = None
    
    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance
    
    def load(self) -> LoaderConfig:
        """Load configuration from environment (and .env)."""
        load_dotenv()
        env = os.getenv("ENVIRONMENT", "development")
        try:
            self._config = LoaderConfig(
                src=get_script_dirs(),
                preload=get_flag("LUA_LOADER_PRELOAD", True),
                extension=os.getenv("LUA_LOADER_EXTENSION", DEFAULT_EXTENSION),
                namespace=get_flag("LUA_LOADER_NAMESPACE", False),
                redis_url=get_redis_url(),
                log_level=os.getenv("LOG_LEVEL", "DEBUG" if env != "production" else "INFO"),
            )
        except ValueError as e:
            raise UsageError(str(e)) from e
        return self._config
