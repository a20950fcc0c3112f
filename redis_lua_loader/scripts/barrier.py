"""
Load barrier.

Counts outstanding units of loading work (one per directory listing, one per
script file) and releases once every unit has completed, whether it
succeeded or failed.
"""

import asyncio


class LoadBarrier:
    """
    Completion counter owned by a single loading pass.

    Workers only ever call ``complete()`` once for the unit they were handed.
    The barrier is not released until ``seal()`` has been called, so units
    enqueued while the initial roots are still being scheduled can not
    release it early.

    Not thread-safe: all calls must come from the event loop that owns the
    loading pass.
    """
    
    def __init__(self):
        self._pending = 0
        self._completed = 0
        self._sealed = False
        self._released = asyncio.Event()
    
    @property
    def pending(self) -> int:
        return self._pending
    
    @property
    def completed(self) -> int:
        return self._completed
    
    @property
    def released(self) -> bool:
        return self._released.is_set()
    
    def enqueue(self, units: int = 1) -> None:
        """Account for new units of work before they are started."""
        if units < 0:
            raise ValueError("units must be non-negative")
        if self.released:
            raise RuntimeError("Load barrier already released")
        self._pending += units
    
    def complete(self) -> None:
        """Mark one unit as finished."""
        if self._pending <= 0:
            raise RuntimeError("Load barrier completed more units than were enqueued")
        self._pending -= 1
        self._completed += 1
        self._maybe_release()
    
    def seal(self) -> None:
        """No more top-level units will be added; release as soon as the count drains."""
        self._sealed = True
        self._maybe_release()
    
    async def wait(self) -> None:
        await self._released.wait()
    
    def _maybe_release(self) -> None:
        if not self._sealed or self._pending or self.released:
            return
        self._released.set()
