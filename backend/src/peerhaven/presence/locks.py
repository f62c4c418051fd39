"""Keyed asyncio locks.

Presence transitions take the per-connection lock first and then the
per-room lock; chat sends only take the per-room lock.
"""

from __future__ import annotations

import asyncio
from typing import Dict


class KeyedLocks:
    """Lazily created ``asyncio.Lock`` per key."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def discard(self, key: str) -> None:
        lock = self._locks.get(key)
        if lock is not None and not lock.locked():
            del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
