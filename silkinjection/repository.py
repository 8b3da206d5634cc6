"""
Repository

Concurrent instance caches owned by scopes. Every repository is sized once
at bootstrap from the number of bindings of its scope and never resized.

All repositories share one guarantee: for a given slot (and key) every
caller observes the same published instance. A provider that raises
publishes nothing.
"""

import threading
from typing import Any, Callable, Dict, Hashable, List

_EMPTY = object()


class SlotRepository:
    """One instance per slot with speculative construction.

    Concurrent first calls for the same slot may each run the provider; the
    first result to be published wins and is returned to every caller. Each
    slot has its own lock, held only while publishing, so unrelated slots
    never contend.
    """

    def __init__(self, slot_count: int):
        self._slots: List[Any] = [_EMPTY] * slot_count
        self._locks = [threading.Lock() for _ in range(slot_count)]

    def provide(self, slot: int, provider: Callable[[], Any]) -> Any:
        instance = self._slots[slot]
        if instance is not _EMPTY:
            return instance
        candidate = provider()
        with self._locks[slot]:
            instance = self._slots[slot]
            if instance is _EMPTY:
                self._slots[slot] = instance = candidate
        return instance

    def __len__(self) -> int:
        return len(self._slots)


class ExclusiveSlotRepository(SlotRepository):
    """One instance per slot, the provider runs at most once per slot.

    The slot's lock is held during construction. Use it for suppliers with
    side effects that must not run speculatively.
    """

    def __init__(self, slot_count: int):
        super().__init__(slot_count)
        # reentrant so that a same-thread cycle surfaces as a cycle error
        self._locks = [threading.RLock() for _ in range(slot_count)]

    def provide(self, slot: int, provider: Callable[[], Any]) -> Any:
        instance = self._slots[slot]
        if instance is not _EMPTY:
            return instance
        with self._locks[slot]:
            instance = self._slots[slot]
            if instance is _EMPTY:
                self._slots[slot] = instance = provider()
        return instance


class KeyedRepository:
    """One instance per slot and key, compute-if-absent with single publish.

    Each slot has its own table and lock. Entries live as long as the
    repository; keys are never evicted.
    """

    def __init__(self, slot_count: int):
        self._tables: List[Dict[Hashable, Any]] = [{} for _ in range(slot_count)]
        self._locks = [threading.Lock() for _ in range(slot_count)]

    def provide(self, slot: int, key: Hashable, provider: Callable[[], Any]) -> Any:
        if not 0 <= slot < len(self._tables):
            raise IndexError(f"slot {slot} out of range 0..{len(self._tables) - 1}")
        table = self._tables[slot]
        instance = table.get(key, _EMPTY)
        if instance is not _EMPTY:
            return instance
        candidate = provider()
        with self._locks[slot]:
            return table.setdefault(key, candidate)

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables)


class ThreadRepository:
    """One slot array per thread; threads never share instances."""

    def __init__(self, slot_count: int):
        self._slot_count = slot_count
        self._local = threading.local()

    def provide(self, slot: int, provider: Callable[[], Any]) -> Any:
        slots = getattr(self._local, 'slots', None)
        if slots is None:
            slots = self._local.slots = [_EMPTY] * self._slot_count
        instance = slots[slot]
        if instance is _EMPTY:
            slots[slot] = instance = provider()
        return instance
