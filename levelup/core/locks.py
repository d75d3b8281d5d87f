# levelup/core/locks.py
import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """
    Process-local mutex per key.

    Row locks (SELECT ... FOR UPDATE) only serialize transactions on stores
    that implement them. SQLite ignores FOR UPDATE, so mutating transactions
    also hold the key for the user they touch until commit or rollback.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._holders: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]

    def is_held(self, key: str) -> bool:
        with self._guard:
            return key in self._holders


def user_key(user_id: int) -> str:
    return f"user:{user_id}"


row_locks = KeyedLock()
