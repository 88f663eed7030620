"""Per-key mutual exclusion for read-then-write sequences."""

from __future__ import annotations

import threading
import weakref
from typing import Hashable


class KeyedLocks:
    """Hand out one lock per key, creating it on first use.

    Locks are held weakly, so a key's lock is dropped once no caller holds
    or waits on it and the map does not grow with every id ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[Hashable, threading.Lock]" = weakref.WeakValueDictionary()

    def __call__(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock
