"""Observed ledger events: the bounded log and the aggregator feeding it."""

from ledger_inventory.events.aggregator import EventAggregator
from ledger_inventory.events.event_log import DEFAULT_CAPACITY, EventLog

__all__ = ["DEFAULT_CAPACITY", "EventAggregator", "EventLog"]
