"""Per-key serialization of command processing.

Cart mutations and checkouts of one owner must never interleave: each one
reads the cart, decides, and commits in a single unit of work. Holding the
owner's lock across ``current_domain.process`` covers the read and the commit.

Keys come from request paths and headers, so a lock only lives while some
thread holds or waits on it. The last one out drops the entry.

The locks are process-local. Workers spread across processes need a shared
lock (e.g. a Redis ``SET NX`` lease) in front of the same entry points.
"""

import threading
from contextlib import contextmanager

from protean.utils.globals import current_domain

_registry_guard = threading.Lock()
# key -> [lock, number of threads holding or waiting on it]
_locks: dict[str, list] = {}


def _acquire_entry(key: str) -> threading.RLock:
    with _registry_guard:
        entry = _locks.get(key)
        if entry is None:
            entry = _locks[key] = [threading.RLock(), 0]
        entry[1] += 1
        return entry[0]


def _release_entry(key: str) -> None:
    with _registry_guard:
        entry = _locks[key]
        entry[1] -= 1
        if entry[1] == 0:
            del _locks[key]


@contextmanager
def serialized(key: str):
    lock = _acquire_entry(key)
    try:
        with lock:
            yield
    finally:
        _release_entry(key)


def owner_lock(owner_id: str):
    return serialized(f"owner:{owner_id}")


def process_for_owner(owner_id: str, command):
    """Process a command synchronously while holding the owner's lock."""
    with owner_lock(owner_id):
        return current_domain.process(command, asynchronous=False)


def process_for_order(order_id: str, command):
    """Process a command synchronously while holding the order's lock."""
    with serialized(f"order:{order_id}"):
        return current_domain.process(command, asynchronous=False)
