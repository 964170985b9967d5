"""Per-group locks for serializing mutations.

Mutating operations on one group run one at a time inside this process,
while operations on different groups proceed independently.
"""

import asyncio
import threading
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class GroupLocks:
    """Registry of asyncio locks keyed by group name.

    Locks are held in a weak-valued mapping: a lock disappears once no
    coroutine holds or waits on it, so the registry does not grow with the
    number of groups ever touched.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    def get(self, group_name: str) -> asyncio.Lock:
        """Get the lock for a group, creating it if needed."""
        with self._registry_lock:
            lock = self._locks.get(group_name)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[group_name] = lock
            return lock

    @asynccontextmanager
    async def hold(self, group_name: str) -> AsyncIterator[None]:
        """Hold the lock of ``group_name`` for the duration of the block.

        Example:
            async with locks.hold("xmas"):
                ...
        """
        lock = self.get(group_name)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


_group_locks: GroupLocks | None = None


def get_group_locks() -> GroupLocks:
    """Get the process-wide lock registry."""
    global _group_locks
    if _group_locks is None:
        _group_locks = GroupLocks()
    return _group_locks
