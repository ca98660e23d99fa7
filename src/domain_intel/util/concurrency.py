"""Worker pool for the batch scanner.

A fixed number of domain slots, so a 5,000-domain list never opens 5,000
connections at once, plus optional spacing between slot handouts for
targets that dislike bursts.
"""

import asyncio
import time
from contextlib import asynccontextmanager


class StartSpacer:
    """Enforces a minimum gap between consecutive domain starts.

    delay <= 0 turns it off.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self._last_start = 0.0
        self._lock = asyncio.Lock()

    async def wait(self):
        if self.delay <= 0:
            return
        async with self._lock:
            gap = time.monotonic() - self._last_start
            if gap < self.delay:
                await asyncio.sleep(self.delay - gap)
            self._last_start = time.monotonic()


class WorkerPool:
    """Bounded slots for in-flight domains.

    Must be created inside the event loop that uses it. Tracks the peak
    number of busy slots for the batch summary.
    """

    def __init__(self, size: int = 5, start_delay: float = 0.0):
        self.size = size
        self._slots = asyncio.Semaphore(size)
        self._spacer = StartSpacer(start_delay)
        self.busy = 0
        self.peak = 0

    @asynccontextmanager
    async def slot(self):
        """Hold one slot for the duration of the block.

        Usage:
            async with pool.slot():
                result = await scanner.scan(domain)
        """
        async with self._slots:
            await self._spacer.wait()
            self.busy += 1
            self.peak = max(self.peak, self.busy)
            try:
                yield
            finally:
                self.busy -= 1
