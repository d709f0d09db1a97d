"""
Keyed scheduling locks for resource timelines.

Validating an assignment reads a resource's timeline and then writes a new
entry into it. Two requests doing that for the same resource and day at
the same time would both pass validation, so mutations hold a lock per
``(resource_kind, resource_id, date)`` slot for the whole
read-validate-write sequence. Unrelated resources and days never wait on
each other.

Locks are created on first use and dropped once nobody holds or waits on
them, so the arena stays as small as the set of slots in flight.
"""

import threading
import time
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from backend.src.services.exceptions import ResourceLockTimeoutError
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")

LockKey = Tuple[str, int, date]


class _SlotLock:
    """A lock plus the number of threads holding or waiting on it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class ResourceLockArena:
    """
    Arena of locks keyed by resource slot.

    Keys are always acquired in sorted order, so two mutations that touch
    overlapping slots cannot deadlock.

    Usage:
        >>> arena = ResourceLockArena()
        >>> with arena.hold([("sng", 1, date(2024, 1, 10))], timeout=5):
        ...     pass  # read timeline, validate, write
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._slots: Dict[LockKey, _SlotLock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _checkout(self, key: LockKey) -> _SlotLock:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = _SlotLock()
                self._slots[key] = slot
            slot.users += 1
            return slot

    def _checkin(self, key: LockKey, slot: _SlotLock) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0:
                self._slots.pop(key, None)

    @contextmanager
    def hold(self, keys: Iterable[LockKey], timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold the locks of every key for the duration of the block.

        Args:
            keys: Slots to lock (duplicates are ignored)
            timeout: Maximum total wait in seconds (None waits forever)

        Raises:
            ResourceLockTimeoutError: If all locks could not be acquired in time
        """
        ordered: List[LockKey] = sorted(set(keys))
        deadline = None if timeout is None else time.monotonic() + timeout
        acquired: List[Tuple[LockKey, _SlotLock]] = []

        try:
            for key in ordered:
                slot = self._checkout(key)
                if deadline is None:
                    got_it = slot.lock.acquire()
                else:
                    got_it = slot.lock.acquire(timeout=max(0.0, deadline - time.monotonic()))
                if not got_it:
                    self._checkin(key, slot)
                    logger.warning(
                        f"Timed out waiting for scheduling lock {key}",
                        extra={"lock_key": str(key), "timeout": timeout},
                    )
                    raise ResourceLockTimeoutError(ordered, timeout)
                acquired.append((key, slot))
            yield
        finally:
            for key, slot in reversed(acquired):
                slot.lock.release()
                self._checkin(key, slot)


_arena: Optional[ResourceLockArena] = None
_arena_guard = threading.Lock()


def get_resource_lock_arena() -> ResourceLockArena:
    """Get the process-wide lock arena."""
    global _arena
    with _arena_guard:
        if _arena is None:
            _arena = ResourceLockArena()
        return _arena
