"""
Pause/stop gate for a running session.

The search loop calls checkpoint() at its safe points. A paused gate blocks
there until resume() or stop(); a stopped gate never blocks again and tells
the loop to exit.
"""

import asyncio


class RunGate:
    """Cooperative pause/stop signal shared by the controller and the loop."""

    def __init__(self):
        self._open = asyncio.Event()
        self._open.set()
        self._stopped = False

    @property
    def paused(self) -> bool:
        return not self._open.is_set() and not self._stopped

    @property
    def stopped(self) -> bool:
        return self._stopped

    def pause(self):
        if not self._stopped:
            self._open.clear()

    def resume(self):
        self._open.set()

    def stop(self):
        self._stopped = True
        self._open.set()

    async def checkpoint(self) -> bool:
        """Wait while paused. Returns True if the loop should keep going."""
        if not self._stopped:
            await self._open.wait()
        return not self._stopped
