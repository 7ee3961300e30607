"""
Per-entity exclusive locks.

Every mutation of a rider, driver or trip runs while holding that
entity's ``asyncio.Lock``.  Operations spanning several entities ask for
all their keys at once; keys are acquired in one fixed global order
(``LockKey`` sorts by rank, then namespace, then identifier), so two
operations can never wait on each other in a cycle.

Locks live in a weak-value registry: a lock exists only while some task
holds or waits on it.
"""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, NamedTuple


class LockKey(NamedTuple):
    rank: int
    namespace: str
    ident: str


class EntityLocks:
    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[LockKey, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: LockKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def is_locked(self, key: LockKey) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, *keys: LockKey) -> AsyncIterator[tuple[LockKey, ...]]:
        """Acquire every key in global order; release in reverse order."""
        ordered = tuple(sorted(set(keys)))
        acquired: list[asyncio.Lock] = []
        try:
            for key in ordered:
                lock = self._lock_for(key)
                await lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
