"""
Readiness and error signalling.

ReadinessGate combines "store connected" and "scripts loaded" into a single
ready signal that fires at most once. ErrorChannel fans errors out to every
listener, any number of times.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional

from redis_lua_loader.utils.logger import Logger


class ReadinessState(Enum):
    IDLE = "idle"
    WAITING = "waiting"
    READY = "ready"


class ReadinessGate:
    """
    Idle -> Waiting -> Ready.
    
    Ready needs both marks; it is terminal and its listeners are called once.
    There is no timeout: if a precondition never resolves the gate waits
    forever.
    """
    
    def __init__(self):
        self.state = ReadinessState.IDLE
        self.store_connected = False
        self.scripts_loaded = False
        self._event = asyncio.Event()
        self._listeners: List[Callable[[], None]] = []
    
    @property
    def is_ready(self) -> bool:
        return self.state is ReadinessState.READY
    
    def begin(self) -> None:
        if self.state is ReadinessState.IDLE:
            self.state = ReadinessState.WAITING
    
    def mark_store_connected(self) -> None:
        self.store_connected = True
        self._advance()
    
    def mark_scripts_loaded(self) -> None:
        self.scripts_loaded = True
        self._advance()
    
    def on_ready(self, callback: Callable[[], None]) -> None:
        """Register a ready listener. Called right away if the gate is already open."""
        if self.is_ready:
            callback()
        else:
            self._listeners.append(callback)
    
    async def wait(self) -> None:
        await self._event.wait()
    
    def _advance(self) -> None:
        if self.is_ready or not (self.store_connected and self.scripts_loaded):
            return
        self.state = ReadinessState.READY
        self._event.set()
        listeners, self._listeners = self._listeners, []
        for callback in listeners:
            callback()


class ErrorChannel:
    """Multi-fire error notifications. Errors with no listener are logged, not dropped."""
    
    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or Logger("redis-lua-loader")
        self._listeners: List[Callable[[Exception], None]] = []
    
    def subscribe(self, callback: Callable[[Exception], None]) -> Callable[[], None]:
        """Add a listener; returns a function that removes it again."""
        self._listeners.append(callback)
        
        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
        
        return unsubscribe
    
    def emit(self, error: Exception) -> None:
        if not self._listeners:
            self.logger.error(f"Unhandled loader error: {error}")
            return
        for callback in list(self._listeners):
            try:
                callback(error)
            except Exception as e:
                # a failing listener does not affect the others
                self.logger.error(f"Error listener raised while handling `{error}`: {e}")
    
    def __len__(self) -> int:
        return len(self._listeners)
