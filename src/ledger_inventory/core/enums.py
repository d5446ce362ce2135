"""Enumerations used across the inventory client."""

from enum import Enum


class Role(str, Enum):
    OWNER = "owner"
    STAFF = "staff"
    PUBLIC = "public"


class Operation(str, Enum):
    """Mutating operations the client can request.

    ``PAUSE`` and ``UNPAUSE`` are gated separately but both submit the
    ledger's ``setPaused`` method.
    """

    ADD_ITEM = "add_item"
    PURCHASE = "purchase"
    RESTOCK = "restock"
    UPDATE_PRICE = "update_price"
    UPDATE_THRESHOLD = "update_threshold"
    REMOVE_ITEM = "remove_item"
    UPDATE_STAFF = "update_staff"
    WITHDRAW = "withdraw"
    PAUSE = "pause"
    UNPAUSE = "unpause"

    @property
    def ledger_method(self) -> str:
        return _LEDGER_METHODS[self]


_LEDGER_METHODS: dict[Operation, str] = {
    Operation.ADD_ITEM: "addItem",
    Operation.PURCHASE: "purchase",
    Operation.RESTOCK: "restock",
    Operation.UPDATE_PRICE: "updatePrice",
    Operation.UPDATE_THRESHOLD: "updateThreshold",
    Operation.REMOVE_ITEM: "removeItem",
    Operation.UPDATE_STAFF: "updateStaff",
    Operation.WITHDRAW: "withdraw",
    Operation.PAUSE: "setPaused",
    Operation.UNPAUSE: "setPaused",
}

# Operations whose first argument is an item id
ITEM_OPERATIONS: frozenset[Operation] = frozenset({
    Operation.PURCHASE,
    Operation.RESTOCK,
    Operation.UPDATE_PRICE,
    Operation.UPDATE_THRESHOLD,
    Operation.REMOVE_ITEM,
})


class EventKind(str, Enum):
    """Domain events emitted by the ledger (names match the contract)."""

    ITEM_ADDED = "ItemAdded"
    ITEM_PURCHASED = "ItemPurchased"
    STOCK_UPDATED = "StockUpdated"
    PRICE_UPDATED = "PriceUpdated"
    THRESHOLD_UPDATED = "ThresholdUpdated"
    LOW_STOCK = "LowStock"
    STAFF_ADDED = "StaffAdded"
    STAFF_REMOVED = "StaffRemoved"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    WITHDRAWAL = "Withdrawal"


class FailureKind(str, Enum):
    """Classification of a failed mutation, as surfaced to the caller."""

    UNAUTHORIZED = "unauthorized"
    REJECTED = "rejected"
    REVERTED = "reverted"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REMOTE_UNAVAILABLE = "remote_unavailable"
