"""
Script registry.

Tracks every script a loader has discovered, its registration state and the
callable attached to it. A name can only ever be claimed once per loader.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from redis_lua_loader.errors import ConflictError, UsageError


class ScriptStatus(Enum):
    """Lifecycle of a discovered script."""
    DISCOVERED = "discovered"
    REGISTERING = "registering"
    READY = "ready"
    FAILED = "failed"


@dataclass(slots=True)
class ScriptEntry:
    """A discovered script and its registration state."""
    name: str
    source: str
    path: Optional[Path] = None
    sha: Optional[str] = None
    status: ScriptStatus = ScriptStatus.DISCOVERED
    error: Optional[Exception] = field(default=None, repr=False)
    
    @property
    def is_ready(self) -> bool:
        return self.status is ScriptStatus.READY
    
    def mark_registering(self) -> None:
        self._transition(ScriptStatus.DISCOVERED, ScriptStatus.REGISTERING)
    
    def mark_ready(self, sha: Optional[str] = None) -> None:
        if self.status not in (ScriptStatus.DISCOVERED, ScriptStatus.REGISTERING):
            raise RuntimeError(f"Script `{self.name}` can not become ready from {self.status.value}")
        self.sha = sha
        self.status = ScriptStatus.READY
    
    def mark_failed(self, error: Exception) -> None:
        if self.status is ScriptStatus.READY:
            raise RuntimeError(f"Script `{self.name}` is already ready")
        self.error = error
        self.status = ScriptStatus.FAILED
    
    def _transition(self, expected: ScriptStatus, new: ScriptStatus) -> None:
        if self.status is not expected:
            raise RuntimeError(
                f"Script `{self.name}` can not move from {self.status.value} to {new.value}"
            )
        self.status = new


class ScriptRegistry:
    """
    Name -> ScriptEntry mapping for one loader.
    
    The first script to claim a name keeps it. Failed scripts keep their claim
    (so a later script with the same name is still a conflict) but are
    otherwise invisible: ``get``, ``sha``, ``names`` and ``in`` only see
    scripts that are ready.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, ScriptEntry] = {}
        self._functions: Dict[str, Callable] = {}
    
    def register(self, entry: ScriptEntry) -> ScriptEntry:
        """Claim ``entry.name``; raise ConflictError if it is already taken."""
        with self._lock:
            if entry.name in self._entries:
                raise ConflictError(entry.name, entry.path)
            self._entries[entry.name] = entry
        return entry
    
    def attach(self, name: str, function: Callable) -> None:
        """Attach the callable for a ready script. Never replaces an existing one."""
        with self._lock:
            entry = self._entries.get(name)
            if entry is None or not entry.is_ready:
                raise UsageError(f"Script name `{name}` not loaded.")
            if name in self._functions:
                raise ConflictError(name, entry.path)
            self._functions[name] = function
    
    def get(self, name: str) -> Optional[ScriptEntry]:
        entry = self._entries.get(name)
        if entry is None or not entry.is_ready:
            return None
        return entry
    
    def function(self, name: str) -> Optional[Callable]:
        return self._functions.get(name)
    
    def sha(self, name: str) -> Optional[str]:
        entry = self.get(name)
        return entry.sha if entry else None
    
    def source(self, name: str) -> Optional[str]:
        entry = self.get(name)
        return entry.source if entry else None
    
    def names(self) -> List[str]:
        """Names with a callable attached."""
        with self._lock:
            return sorted(self._functions)
    
    def entries(self) -> List[ScriptEntry]:
        """Every claimed entry, including failed ones."""
        with self._lock:
            return list(self._entries.values())
    
    def failed(self) -> List[ScriptEntry]:
        return [e for e in self.entries() if e.status is ScriptStatus.FAILED]
    
    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None
    
    def __len__(self) -> int:
        with self._lock:
            return sum(1 for e in self._entries.values() if e.is_ready)
