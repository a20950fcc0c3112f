"""
Error types raised and reported by the loader.
"""

from pathlib import Path
from typing import Optional


class LuaLoaderError(Exception):
    """Base class for all loader errors."""


class RemoteError(LuaLoaderError):
    """Redis rejected a command or could not be reached."""


class UsageError(LuaLoaderError, LookupError):
    """The caller asked for something that was never loaded, or passed bad options."""


class DiscoveryError(LuaLoaderError):
    """A script directory could not be listed or a script file could not be read."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConflictError(LuaLoaderError):
    """Two scripts resolved to the same name."""

    def __init__(self, name: str, path: Optional[Path] = None):
        super().__init__(f"Script naming conflict for `{name}`.")
        self.name = name
        self.path = path


class RegistrationError(LuaLoaderError):
    """SCRIPT LOAD failed for a script."""

    def __init__(self, name: str, reason: str, path: Optional[Path] = None):
        super().__init__(f"Unable to load script: `{name}` - {reason}")
        self.name = name
        self.path = path


class ScriptExecutionError(LuaLoaderError):
    """
    A loaded script failed while running in Redis.

    Carries the script name, its source and SHA so the failure can be traced
    back to the file that produced it.
    """

    PREFIX = "Error running lua script: `{name}`."

    def __init__(
        self,
        name: str,
        reason: str,
        source: Optional[str] = None,
        sha: Optional[str] = None,
    ):
        super().__init__(f"{self.PREFIX.format(name=name)} {reason}")
        self.name = name
        self.reason = reason
        self.source = source
        self.sha = sha
