"""Core domain models used across the inventory client.

These mirror what the ledger reports.  None of them carries business rules:
the ledger decides, the client reflects.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import ITEM_OPERATIONS, FailureKind, Operation
from .ids import new_id, utc_now


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

class InventoryItem(BaseModel):
    """One inventory record as last reported by the ledger."""

    model_config = {"frozen": True}

    id: int = Field(ge=0)
    name: str
    stock: int = Field(ge=0)
    price: int = Field(ge=0)  # smallest currency unit (wei)
    threshold: int = Field(ge=0)  # reorder threshold

    @property
    def is_low_stock(self) -> bool:
        """Display hint only; the ledger emits LowStock authoritatively."""
        return self.stock <= self.threshold


class ItemSnapshot(BaseModel):
    """Raw result of the ledger's bulk item query: five parallel sequences.

    Lengths are not validated here; the mirror rejects a ragged snapshot.
    """

    ids: list[int] = Field(default_factory=list)
    names: list[str] = Field(default_factory=list)
    stocks: list[int] = Field(default_factory=list)
    prices: list[int] = Field(default_factory=list)
    thresholds: list[int] = Field(default_factory=list)

    def lengths(self) -> dict[str, int]:
        return {
            "ids": len(self.ids),
            "names": len(self.names),
            "stocks": len(self.stocks),
            "prices": len(self.prices),
            "thresholds": len(self.thresholds),
        }

    @classmethod
    def from_items(cls, items: list[InventoryItem]) -> ItemSnapshot:
        return cls(
            ids=[i.id for i in items],
            names=[i.name for i in items],
            stocks=[i.stock for i in items],
            prices=[i.price for i in items],
            thresholds=[i.threshold for i in items],
        )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TxReceipt(BaseModel):
    """Confirmation returned by the gateway for a mined transaction."""

    tx_hash: str
    method: str
    from_account: str
    value: int = 0
    block_number: int = 0
    confirmed_at: datetime = Field(default_factory=utc_now)


class MutationRequest(BaseModel):
    """A request to run one mutating operation.  Immutable after creation."""

    request_id: str = Field(default_factory=new_id)
    operation: Operation
    args: tuple[Any, ...] = ()

    @property
    def item_id(self) -> int | None:
        """Item the operation targets, or ``None`` for non-item operations."""
        if self.operation in ITEM_OPERATIONS and self.args:
            try:
                return int(self.args[0])
            except (TypeError, ValueError):
                return None
        return None


class MutationResult(BaseModel):
    """Outcome of a dispatched mutation.

    The dispatcher never raises; failures are encoded here with the
    operation name so the caller can surface them as a notification.
    """

    request_id: str
    operation: Operation
    success: bool
    failure: FailureKind | None = None
    error: str = ""
    value: int = 0  # value attached to the submission
    receipt: TxReceipt | None = None
    gateway_called: bool = False
    refresh_error: str = ""  # set when the post-confirmation refresh failed
    completed_at: datetime = Field(default_factory=utc_now)

    @property
    def notification(self) -> str:
        """User-facing one-line summary."""
        name = self.operation.value
        if self.success:
            msg = f"{name} succeeded"
            if self.refresh_error:
                msg += f" (inventory refresh failed: {self.refresh_error})"
            return msg
        kind = self.failure.value if self.failure else "failed"
        if self.error:
            return f"{name} failed [{kind}]: {self.error}"
        return f"{name} failed [{kind}]"
