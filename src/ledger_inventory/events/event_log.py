"""Bounded, arrival-ordered log of observed domain events.

The most recent event sits at the head.  Once the log holds ``capacity``
entries each insert evicts the oldest one from the tail, regardless of kind.
Insert and evict happen in one synchronous step, so concurrent deliveries
on the event loop cannot interleave inside it.
"""

from __future__ import annotations

from collections import deque
from typing import Iterator

from ledger_inventory.core.enums import EventKind
from ledger_inventory.core.events import DomainEvent

DEFAULT_CAPACITY = 100


class EventLog:
    """Session-owned ring of the latest ``capacity`` domain events."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._entries: deque[DomainEvent] = deque(maxlen=capacity)
        self._inserted = 0
        self._evicted = 0

    def insert(self, event: DomainEvent) -> DomainEvent | None:
        """Put *event* at the head; return the evicted tail entry, if any."""
        evicted: DomainEvent | None = None
        if len(self._entries) == self._entries.maxlen:
            evicted = self._entries[-1]
            self._evicted += 1
        self._entries.appendleft(event)
        self._inserted += 1
        return evicted

    def entries(self) -> list[DomainEvent]:
        """Snapshot, most recent first."""
        return list(self._entries)

    def by_kind(self, kind: EventKind) -> list[DomainEvent]:
        return [e for e in self._entries if e.kind == kind]

    @property
    def latest(self) -> DomainEvent | None:
        return self._entries[0] if self._entries else None

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or DEFAULT_CAPACITY

    @property
    def inserted(self) -> int:
        """Total events ever inserted."""
        return self._inserted

    @property
    def evicted(self) -> int:
        return self._evicted

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DomainEvent]:
        return iter(list(self._entries))
