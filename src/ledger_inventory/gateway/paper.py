"""Paper ledger gateway: simulated inventory contract with no network calls.

Maintains owner, staff roster, pause flag, items and collected balance in
memory.  Transactions confirm immediately; events are pushed onto
per-subscription queues and observed later by whoever iterates them, so
delivery stays asynchronous relative to ``submit``.

The contract's own rules (owner-only methods, staff restock, exact payment,
pause) are applied here so that remote rejections can be exercised end to
end.  The session core never relies on this class.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, AsyncIterator, Callable

from ledger_inventory.core.config import PaperLedgerConfig, SeedItem
from ledger_inventory.core.enums import EventKind
from ledger_inventory.core.errors import (
    InsufficientFunds,
    Rejected,
    RemoteUnavailable,
    Reverted,
    Unauthorized,
)
from ledger_inventory.core.events import LedgerEvent
from ledger_inventory.core.ids import new_id, same_account
from ledger_inventory.core.models import InventoryItem, ItemSnapshot, TxReceipt

logger = logging.getLogger(__name__)

_CLOSED = object()


class PaperLedgerGateway:
    """In-memory stand-in for the remote inventory ledger.

    Parameters
    ----------
    owner:
        Address of the contract owner.
    staff:
        Addresses holding the staff role.
    paused:
        Initial pause flag.
    items:
        Seed items; ids are assigned sequentially from 1.
    balance:
        Wei already held by the contract.
    wallets:
        Optional ``account -> wei`` balances.  Accounts not listed can pay
        any amount.
    """

    def __init__(
        self,
        owner: str,
        staff: list[str] | None = None,
        paused: bool = False,
        items: list[SeedItem] | None = None,
        balance: int = 0,
        wallets: dict[str, int] | None = None,
    ) -> None:
        self._owner = owner
        self._staff: set[str] = {a.lower() for a in (staff or [])}
        self._paused = paused
        self._items: dict[int, InventoryItem] = {}
        self._next_id = 1
        self._balance = balance
        self._wallets: dict[str, int] = {
            a.lower(): v for a, v in (wallets or {}).items()
        }
        self._block = 0
        self._available = True

        self._subscribers: dict[EventKind, list[asyncio.Queue[Any]]] = defaultdict(list)
        self._emitted: list[LedgerEvent] = []

        #: Every gateway call as ``(name, args)``, for call-count assertions
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

        for seed in items or []:
            self._insert(seed.name, seed.stock, seed.price, seed.threshold)

        self._handlers: dict[str, Callable[..., list[LedgerEvent]]] = {
            "addItem": self._add_item,
            "purchase": self._purchase,
            "restock": self._restock,
            "updatePrice": self._update_price,
            "updateThreshold": self._update_threshold,
            "removeItem": self._remove_item,
            "updateStaff": self._update_staff,
            "withdraw": self._withdraw,
            "setPaused": self._set_paused,
        }

        logger.info(
            "PaperLedgerGateway initialised (owner=%s, staff=%d, items=%d, paused=%s)",
            owner,
            len(self._staff),
            len(self._items),
            paused,
        )

    @classmethod
    def from_config(cls, config: PaperLedgerConfig) -> PaperLedgerGateway:
        return cls(
            owner=config.owner,
            staff=list(config.staff),
            paused=config.paused,
            items=list(config.items),
            balance=config.balance,
        )

    # ------------------------------------------------------------------
    # Simulation controls
    # ------------------------------------------------------------------

    def set_available(self, available: bool) -> None:
        """Simulate the node going away (every call raises RemoteUnavailable)."""
        self._available = available

    def redeliver(self, event: LedgerEvent) -> None:
        """Push an already-emitted event again, as a reconnecting node would."""
        self._publish(event)

    def close_streams(self) -> None:
        """End every open subscription stream."""
        for queues in self._subscribers.values():
            for queue in queues:
                queue.put_nowait(_CLOSED)

    @property
    def emitted(self) -> list[LedgerEvent]:
        return list(self._emitted)

    @property
    def balance(self) -> int:
        return self._balance

    def call_count(self, name: str | None = None) -> int:
        if name is None:
            return len(self.calls)
        return sum(1 for n, _ in self.calls if n == name)

    # ------------------------------------------------------------------
    # View calls
    # ------------------------------------------------------------------

    async def query_owner(self) -> str:
        self._enter("query_owner")
        return self._owner

    async def query_staff(self, account: str) -> bool:
        self._enter("query_staff", account)
        return account.lower() in self._staff

    async def query_paused(self) -> bool:
        self._enter("query_paused")
        return self._paused

    async def query_all_items(self) -> ItemSnapshot:
        self._enter("query_all_items")
        return ItemSnapshot.from_items(list(self._items.values()))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def submit(
        self,
        method: str,
        args: tuple[Any, ...],
        from_account: str,
        value: int = 0,
    ) -> TxReceipt:
        self._enter("submit", method, args, from_account, value)

        handler = self._handlers.get(method)
        if handler is None:
            raise Rejected(f"unknown method {method!r}")

        wallet = self._wallets.get(from_account.lower())
        if wallet is not None and value > wallet:
            raise InsufficientFunds(
                f"{from_account} holds {wallet} wei, needs {value}"
            )
        if value and method != "purchase":
            raise Reverted(f"{method} is not payable")

        try:
            events = handler(from_account, value, *args)
        except TypeError as exc:
            raise Rejected(f"bad arguments for {method}: {exc}") from exc

        if wallet is not None:
            self._wallets[from_account.lower()] = wallet - value

        self._block += 1
        receipt = TxReceipt(
            tx_hash="0x" + new_id().replace("-", ""),
            method=method,
            from_account=from_account,
            value=value,
            block_number=self._block,
        )
        for event in events:
            self._publish(
                event.model_copy(
                    update={"block_number": self._block, "tx_hash": receipt.tx_hash}
                )
            )
        logger.debug("Paper tx confirmed: %s from=%s block=%d", method, from_account, self._block)
        return receipt

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, kind: EventKind) -> AsyncIterator[LedgerEvent]:
        """Register a subscription now; events queue until iterated."""
        self._enter("subscribe", kind)
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._subscribers[kind].append(queue)
        return self._stream(kind, queue)

    async def _stream(
        self, kind: EventKind, queue: asyncio.Queue[Any],
    ) -> AsyncIterator[LedgerEvent]:
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            if queue in self._subscribers[kind]:
                self._subscribers[kind].remove(queue)

    def _publish(self, event: LedgerEvent) -> None:
        self._emitted.append(event)
        for queue in self._subscribers.get(event.kind, []):
            queue.put_nowait(event)

    # ------------------------------------------------------------------
    # Contract rules
    # ------------------------------------------------------------------

    def _enter(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if not self._available:
            raise RemoteUnavailable("paper ledger is offline")

    def _insert(self, name: str, stock: int, price: int, threshold: int) -> InventoryItem:
        item = InventoryItem(
            id=self._next_id, name=name, stock=stock, price=price, threshold=threshold,
        )
        self._items[item.id] = item
        self._next_id += 1
        return item

    def _require_owner(self, account: str) -> None:
        if not same_account(account, self._owner):
            raise Unauthorized("caller is not the owner")

    def _require_active(self) -> None:
        if self._paused:
            raise Reverted("contract is paused")

    def _require_item(self, item_id: int) -> InventoryItem:
        item = self._items.get(int(item_id))
        if item is None:
            raise Reverted(f"item {item_id} does not exist")
        return item

    def _low_stock(self, item: InventoryItem) -> list[LedgerEvent]:
        if item.stock <= item.threshold:
            return [LedgerEvent(
                kind=EventKind.LOW_STOCK,
                payload={"item_id": item.id, "stock": item.stock, "threshold": item.threshold},
            )]
        return []

    def _add_item(
        self, sender: str, value: int, name: str, stock: int, price: int, threshold: int,
    ) -> list[LedgerEvent]:
        self._require_owner(sender)
        self._require_active()
        if not name:
            raise Reverted("name is required")
        if min(stock, price, threshold) < 0:
            raise Reverted("negative value")
        item = self._insert(name, int(stock), int(price), int(threshold))
        return [LedgerEvent(
            kind=EventKind.ITEM_ADDED,
            payload={
                "item_id": item.id, "name": item.name,
                "stock": item.stock, "price": item.price,
            },
        )]

    def _purchase(self, sender: str, value: int, item_id: int, quantity: int) -> list[LedgerEvent]:
        self._require_active()
        item = self._require_item(item_id)
        quantity = int(quantity)
        if quantity <= 0:
            raise Reverted("quantity must be positive")
        if quantity > item.stock:
            raise Reverted("not enough stock")
        if value != item.price * quantity:
            raise Reverted("incorrect payment")
        item = item.model_copy(update={"stock": item.stock - quantity})
        self._items[item.id] = item
        self._balance += value
        return [
            LedgerEvent(
                kind=EventKind.ITEM_PURCHASED,
                payload={"item_id": item.id, "buyer": sender, "quantity": quantity},
            ),
            *self._low_stock(item),
        ]

    def _restock(self, sender: str, value: int, item_id: int, amount: int) -> list[LedgerEvent]:
        if not (same_account(sender, self._owner) or sender.lower() in self._staff):
            raise Unauthorized("caller is not owner or staff")
        self._require_active()
        item = self._require_item(item_id)
        if int(amount) <= 0:
            raise Reverted("amount must be positive")
        item = item.model_copy(update={"stock": item.stock + int(amount)})
        self._items[item.id] = item
        return [LedgerEvent(
            kind=EventKind.STOCK_UPDATED,
            payload={"item_id": item.id, "new_stock": item.stock},
        )]

    def _update_price(self, sender: str, value: int, item_id: int, new_price: int) -> list[LedgerEvent]:
        self._require_owner(sender)
        self._require_active()
        item = self._require_item(item_id)
        if int(new_price) < 0:
            raise Reverted("negative price")
        item = item.model_copy(update={"price": int(new_price)})
        self._items[item.id] = item
        return [LedgerEvent(
            kind=EventKind.PRICE_UPDATED,
            payload={"item_id": item.id, "new_price": item.price},
        )]

    def _update_threshold(
        self, sender: str, value: int, item_id: int, new_threshold: int,
    ) -> list[LedgerEvent]:
        self._require_owner(sender)
        self._require_active()
        item = self._require_item(item_id)
        if int(new_threshold) < 0:
            raise Reverted("negative threshold")
        item = item.model_copy(update={"threshold": int(new_threshold)})
        self._items[item.id] = item
        return [
            LedgerEvent(
                kind=EventKind.THRESHOLD_UPDATED,
                payload={"item_id": item.id, "new_threshold": item.threshold},
            ),
            *self._low_stock(item),
        ]

    def _remove_item(self, sender: str, value: int, item_id: int) -> list[LedgerEvent]:
        self._require_owner(sender)
        self._require_active()
        item = self._require_item(item_id)
        del self._items[item.id]
        return []

    def _update_staff(self, sender: str, value: int, account: str, add: bool) -> list[LedgerEvent]:
        self._require_owner(sender)
        if add:
            self._staff.add(account.lower())
            kind = EventKind.STAFF_ADDED
        else:
            self._staff.discard(account.lower())
            kind = EventKind.STAFF_REMOVED
        return [LedgerEvent(kind=kind, payload={"account": account})]

    def _withdraw(self, sender: str, value: int) -> list[LedgerEvent]:
        self._require_owner(sender)
        if self._balance == 0:
            raise Reverted("no funds to withdraw")
        amount, self._balance = self._balance, 0
        return [LedgerEvent(
            kind=EventKind.WITHDRAWAL,
            payload={"owner": sender, "amount": amount},
        )]

    def _set_paused(self, sender: str, value: int, paused: bool) -> list[LedgerEvent]:
        self._require_owner(sender)
        paused = bool(paused)
        if paused == self._paused:
            raise Reverted("already paused" if paused else "not paused")
        self._paused = paused
        kind = EventKind.PAUSED if paused else EventKind.UNPAUSED
        return [LedgerEvent(kind=kind, payload={"by": sender})]
