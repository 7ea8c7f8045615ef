# app/utils/keyed_lock.py
"""
Per-key mutual exclusion for request threads.

Used to serialize "insert vote → recompute → persist" per alert inside one
process. Different keys never block each other. Entries are dropped once no
thread holds or waits on them, so the table does not grow with every alert
ever touched.
"""

import threading
from contextlib import contextmanager


class KeyedLock:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}   # key -> [lock, users]

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)
