"""Get-or-create caches with single-flight loading per key."""
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Hashable, Iterator, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _KeyLock:
    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks(Generic[K]):
    """One lock per key, dropped once no caller holds or waits for it."""

    def __init__(self):
        self._locks: Dict[K, _KeyLock] = {}
        self._lock = threading.Lock()

    @contextmanager
    def hold(self, key: K) -> Iterator[None]:
        """Hold the lock of ``key`` for the duration of the block."""
        with self._lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)


class LoadingCache(Generic[K, V]):
    """
    Thread-safe cache that computes missing values with a loader.

    Concurrent ``get`` calls for the same key are coalesced: the loader runs
    at most once per key, and the other callers wait for its result. Calls for
    different keys do not block each other while loading. A loader failure
    propagates to the caller that ran the loader and nothing is cached, so the
    next caller, including one that was already waiting, loads again.
    """

    def __init__(self, loader: Callable[[K], V]):
        self._loader = loader
        self._values: Dict[K, V] = {}
        self._key_locks: KeyedLocks[K] = KeyedLocks()
        self._lock = threading.Lock()

    def get(self, key: K) -> V:
        """Return the cached value for ``key``, loading it if needed."""
        with self._lock:
            if key in self._values:
                return self._values[key]

        with self._key_locks.hold(key):
            # another caller may have loaded it while we waited
            with self._lock:
                if key in self._values:
                    return self._values[key]
            value = self._loader(key)
            with self._lock:
                self._values[key] = value
            return value

    def get_if_present(self, key: K) -> Optional[V]:
        with self._lock:
            return self._values.get(key)

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._values.pop(key, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._values.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._values)

    def as_dict(self) -> Dict[K, V]:
        with self._lock:
            return dict(self._values)
