"""
academy_payroll.services.locks

Per-key asyncio mutual exclusion.

Responsibilities:
- Serialize check-then-append ledger writes for one employee within a process.
- Drop lock entries once nobody holds or waits on them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLocks:
    """
    One `asyncio.Lock` per key, created on demand. Contention on one key never
    blocks another key; there is no global lock.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# --- Module Notes -----------------------------------------------------------
# Cross-process safety comes from the teacher row's version column; these locks
# only keep same-process writers from burning retries on each other.
