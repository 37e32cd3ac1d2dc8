# projectmap/limiter.py
"""Bounded-concurrency scheduler for leaf I/O work.

Only leaf operations (a stat, a listing, a read-and-tokenize job) go through
a limiter. Recursive directory descent must never be wrapped in the limiter
that gates its own leaf calls: once recursion depth exceeds the slot count
every slot would be held by a parent waiting on a child that cannot start.
"""

import asyncio
from collections import deque

from projectmap.exceptions import LimiterError


class ConcurrencyLimiter:
    """Run at most ``concurrency`` coroutines at once, queueing the rest FIFO."""

    def __init__(self, concurrency: int, name: str = "limiter"):
        if not isinstance(concurrency, int) or concurrency < 1:
            raise LimiterError("concurrency must be a positive integer", {"concurrency": concurrency})
        self.concurrency = concurrency
        self.name = name
        self._running = 0
        self._waiters: deque = deque()

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return sum(1 for fut in self._waiters if not fut.done())

    async def run(self, func, *args, **kwargs):
        """Await ``func(*args, **kwargs)`` once a slot is free.

        The slot is released however the call ends, so a failing job never
        starves the queue. Exceptions propagate to the caller unchanged.
        """
        await self._acquire()
        try:
            return await func(*args, **kwargs)
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._running < self.concurrency and not self._waiters:
            self._running += 1
            return

        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # The slot was already handed over; pass it on.
                self._release()
            else:
                try:
                    self._waiters.remove(fut)
                except ValueError:
                    pass
            raise

    def _release(self) -> None:
        # Hand the slot straight to the next waiter so a newcomer cannot jump the queue.
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return
        self._running -= 1

    def __repr__(self):
        return (
            f"ConcurrencyLimiter(name={self.name!r}, concurrency={self.concurrency}, "
            f"running={self._running}, pending={self.pending})"
        )
