"""
Execution serializer: one global FIFO lane for handler execution.

State:
- running: at most one handler body in flight across the whole process.
- pending: callers waiting on the lock, admitted in acquisition order
  (asyncio.Lock wakes waiters first-in first-out).

Only the handler span goes through the lane; parsing and validation do not.
The lock belongs to the event loop that is serving; a server that is stopped
and started again gets a fresh one.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class ExecutionSerializer:
    """Run handler calls strictly one at a time, in arrival order."""

    def __init__(self):
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending = 0

    def reset(self) -> None:
        """Drop the lock so the next call binds a new one to the running loop."""
        self._lock = None
        self._loop = None
        self._pending = 0

    def _lock_for_running_loop(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
        return self._lock

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        """Await ``call()`` while holding the lane; released on success and failure."""
        lock = self._lock_for_running_loop()
        self._pending += 1
        try:
            await lock.acquire()
        finally:
            self._pending -= 1
        try:
            return await call()
        finally:
            lock.release()

    @property
    def running(self) -> bool:
        return self._lock is not None and self._lock.locked()

    @property
    def queue_depth(self) -> int:
        """Callers currently waiting for the lane."""
        return self._pending


def create_serializer(queued: bool) -> ExecutionSerializer | None:
    """The lane exists only when serialized execution is requested."""
    return ExecutionSerializer() if queued else None
