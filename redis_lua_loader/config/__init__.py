"""
Config Module
Configuration management.
"""

from .settings import ConfigManager, LoaderConfig, OPTIONS_SCHEMA
from .environment import get_redis_url, get_script_dirs, get_flag

__all__ = [
    "ConfigManager",
    "LoaderConfig",
    "OPTIONS_SCHEMA",
    "get_redis_url",
    "get_script_dirs",
    "get_flag",
]
