"""Per-entity write serialization.

Every writer that touches an invariant-bearing record (product stock,
wallet balance, order status) holds that record's key while it reads,
checks and writes, so a conditional update and the commit that follows
it cannot interleave with another writer of the same record.

Locks live in this process only: the service runs as a single writer
process.
"""

import os
import threading
from contextlib import contextmanager


def entity_key(kind: str, identifier) -> str:
    return f"{kind}:{identifier}"


class KeyedLocks:
    """Re-entrant lock per key, acquired in sorted order to avoid deadlocks.

    A key's lock is dropped once nobody holds or waits for it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._entries: dict[str, list] = {}

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [threading.RLock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, *keys: str):
        acquired = []
        try:
            for key in sorted(set(keys)):
                lock = self._checkout(key)
                lock.acquire()
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)


entity_locks = KeyedLocks()


def check_single_writer() -> None:
    """Refuse to serve from several worker processes; they would not share ``entity_locks``."""
    workers = int(os.environ.get("WEB_CONCURRENCY", "1"))
    if workers > 1:
        raise RuntimeError(
            f"WEB_CONCURRENCY={workers}: the storefront must run as a single writer process"
        )
