"""Registries shared by every launch resolved in the process."""
import threading
from typing import Callable, Dict, List, Optional, Tuple

from ec2launch.domain.value_objects import KeyPair, RegionAndName, RegionNameAndIngressRules
from ec2launch.infrastructure.cache import KeyedLocks, LoadingCache


class PlacementGroupMap(LoadingCache[RegionAndName, str]):
    """Placement groups known to exist, created on first request."""


class SecurityGroupMap(LoadingCache[RegionNameAndIngressRules, str]):
    """Security groups known to exist, created on first request."""


class CredentialsStore:
    """Key pairs, with their login material, by region and group or key name."""

    def __init__(self):
        self._pairs: Dict[RegionAndName, KeyPair] = {}
        self._lock = threading.Lock()
        self._key_locks: KeyedLocks[RegionAndName] = KeyedLocks()

    def put(self, key: RegionAndName, pair: KeyPair) -> None:
        with self._lock:
            self._pairs[key] = pair

    def get_or_create(self, key: RegionAndName, create: Callable[[RegionAndName], KeyPair]) -> KeyPair:
        """
        Return the pair stored for ``key``, creating and storing it if absent.

        Concurrent callers for the same key share one call to ``create``. A
        failing ``create`` stores nothing and the next caller tries again.
        """
        pair = self.get(key)
        if pair is not None:
            return pair
        with self._key_locks.hold(key):
            pair = self.get(key)
            if pair is None:
                pair = create(key)
                self.put(key, pair)
            return pair

    def get(self, key: RegionAndName) -> Optional[KeyPair]:
        with self._lock:
            return self._pairs.get(key)

    def contains(self, key: RegionAndName) -> bool:
        with self._lock:
            return key in self._pairs

    def remove(self, key: RegionAndName) -> Optional[KeyPair]:
        with self._lock:
            return self._pairs.pop(key, None)

    def items(self) -> List[Tuple[RegionAndName, KeyPair]]:
        with self._lock:
            return list(self._pairs.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._pairs)
