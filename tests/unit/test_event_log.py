"""Test the bounded, arrival-ordered EventLog."""

import pytest

from ledger_inventory.core.enums import EventKind
from ledger_inventory.core.events import DomainEvent
from ledger_inventory.events.event_log import DEFAULT_CAPACITY, EventLog


def _event(n: int, kind: EventKind = EventKind.STOCK_UPDATED) -> DomainEvent:
    return DomainEvent(kind=kind, payload={"item_id": n, "new_stock": n})


class TestEventLogOrdering:
    def test_newest_at_head(self):
        log = EventLog()
        for n in range(3):
            log.insert(_event(n))

        assert [e.payload["item_id"] for e in log.entries()] == [2, 1, 0]
        assert log.latest.payload["item_id"] == 2

    def test_empty_log(self):
        log = EventLog()
        assert len(log) == 0
        assert log.latest is None
        assert log.entries() == []


class TestEventLogBound:
    def test_default_capacity_is_100(self):
        assert EventLog().capacity == DEFAULT_CAPACITY == 100

    def test_insert_101_evicts_oldest(self):
        log = EventLog()
        events = [_event(n) for n in range(101)]
        evicted = [log.insert(e) for e in events]

        assert len(log) == 100
        assert evicted[:100] == [None] * 100
        assert evicted[100] is events[0]
        assert log.entries()[-1] is events[1]
        assert log.entries()[0] is events[100]
        assert log.inserted == 101
        assert log.evicted == 1

    def test_eviction_ignores_kind(self):
        log = EventLog(capacity=2)
        log.insert(_event(0, EventKind.LOW_STOCK))
        log.insert(_event(1, EventKind.PAUSED))
        log.insert(_event(2, EventKind.STOCK_UPDATED))

        assert [e.kind for e in log] == [EventKind.STOCK_UPDATED, EventKind.PAUSED]
        assert log.by_kind(EventKind.LOW_STOCK) == []

    def test_duplicates_are_kept(self):
        log = EventLog()
        event = _event(1)
        log.insert(event)
        log.insert(event)
        assert len(log) == 2

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            EventLog(capacity=0)
