"""Script discovery, registration and bookkeeping."""

from .barrier import LoadBarrier
from .finder import ScriptFile, ScriptFinder, DEFAULT_EXTENSION
from .registry import ScriptEntry, ScriptRegistry, ScriptStatus
from .orchestrator import RegistrationOrchestrator

__all__ = [
    "LoadBarrier",
    "ScriptFile",
    "ScriptFinder",
    "DEFAULT_EXTENSION",
    "ScriptEntry",
    "ScriptRegistry",
    "ScriptStatus",
    "RegistrationOrchestrator",
]
