"""Event schemas.

``LedgerEvent`` is what a gateway subscription yields.  ``DomainEvent`` is
the immutable record the client keeps in its event log once the event has
arrived.  Events are observational: nothing reconciles state from them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, Field

from .enums import EventKind
from .ids import new_id, utc_now


class LedgerEvent(BaseModel):
    """A raw event as delivered by the ledger subscription."""

    kind: EventKind
    payload: dict[str, Any] = Field(default_factory=dict)
    block_number: int | None = None
    tx_hash: str = ""


class DomainEvent(BaseModel):
    """An observed ledger event stamped on arrival by the client.

    ``received_at`` is the client's receipt time, not the ledger's ordering
    timestamp.
    """

    model_config = {"frozen": True}

    event_id: str = Field(default_factory=new_id)
    kind: EventKind
    payload: dict[str, Any] = Field(default_factory=dict)
    received_at: datetime = Field(default_factory=utc_now)
    block_number: int | None = None
    tx_hash: str = ""

    @classmethod
    def arrived(cls, raw: LedgerEvent) -> DomainEvent:
        """Stamp a raw ledger event with a client id and receipt time."""
        return cls(
            kind=raw.kind,
            payload=dict(raw.payload),
            block_number=raw.block_number,
            tx_hash=raw.tx_hash,
        )

    @property
    def message(self) -> str:
        """Human-readable line for the event log."""
        fmt = _MESSAGES.get(self.kind)
        try:
            return fmt(self.payload) if fmt else self.kind.value
        except KeyError:
            return f"{self.kind.value} {self.payload}"


_MESSAGES: dict[EventKind, Callable[[dict[str, Any]], str]] = {
    EventKind.ITEM_ADDED: lambda p: (
        f"Item {p['item_id']} ({p['name']}) added with stock: "
        f"{p['stock']}, price: {p['price']}"
    ),
    EventKind.ITEM_PURCHASED: lambda p: (
        f"Item {p['item_id']} purchased by {p['buyer']}, "
        f"quantity: {p['quantity']}"
    ),
    EventKind.STOCK_UPDATED: lambda p: (
        f"Item {p['item_id']} stock updated to {p['new_stock']}"
    ),
    EventKind.PRICE_UPDATED: lambda p: (
        f"Item {p['item_id']} price updated to {p['new_price']}"
    ),
    EventKind.THRESHOLD_UPDATED: lambda p: (
        f"Item {p['item_id']} threshold updated to {p['new_threshold']}"
    ),
    EventKind.LOW_STOCK: lambda p: (
        f"Low stock alert for item {p['item_id']}! Current stock: "
        f"{p['stock']}, Threshold: {p['threshold']}"
    ),
    EventKind.STAFF_ADDED: lambda p: f"Staff member added: {p['account']}",
    EventKind.STAFF_REMOVED: lambda p: f"Staff member removed: {p['account']}",
    EventKind.PAUSED: lambda p: f"Contract paused by: {p['by']}",
    EventKind.UNPAUSED: lambda p: f"Contract unpaused by: {p['by']}",
    EventKind.WITHDRAWAL: lambda p: (
        f"{p['amount']} wei withdrawn by {p['owner']}"
    ),
}
