"""MutationDispatcher: the only path for ledger side effects.

Every mutation goes:
    MutationRequest -> CapabilityGate -> Gateway.submit -> mirror refresh

Enforces:
    1. Gate check first; a denied operation never reaches the gateway
    2. One in-flight mutation per item
    3. Purchase value = mirrored price x quantity, read before any refresh
    4. Exactly one submit per request; nothing is retried
    5. Full mirror refresh after every confirmed submit
    6. Role re-resolution after a staff change, pause re-query after a
       pause toggle (never flipped locally)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ledger_inventory.core.enums import FailureKind, Operation
from ledger_inventory.core.errors import (
    QUERY_ERRORS,
    InsufficientFunds,
    InventoryClientError,
    Rejected,
    RemoteUnavailable,
    Reverted,
    SyncError,
    Unauthorized,
)
from ledger_inventory.core.models import MutationRequest, MutationResult, TxReceipt
from ledger_inventory.observability.logger import new_trace_id

if TYPE_CHECKING:
    from .context import SessionContext

logger = logging.getLogger(__name__)


# Checked in order: subclasses before their bases
_FAILURE_MAP: tuple[tuple[type[Exception], FailureKind], ...] = (
    (Unauthorized, FailureKind.UNAUTHORIZED),
    (InsufficientFunds, FailureKind.INSUFFICIENT_FUNDS),
    (Reverted, FailureKind.REVERTED),
    (Rejected, FailureKind.REJECTED),
    (RemoteUnavailable, FailureKind.REMOTE_UNAVAILABLE),
    (ConnectionError, FailureKind.REMOTE_UNAVAILABLE),
    (TimeoutError, FailureKind.REMOTE_UNAVAILABLE),
)


def classify_failure(exc: Exception) -> FailureKind:
    """Map a gateway exception to the failure taxonomy."""
    for exc_type, kind in _FAILURE_MAP:
        if isinstance(exc, exc_type):
            return kind
    return FailureKind.REJECTED


class MutationDispatcher:
    """Executes requested operations against the ledger on behalf of a session.

    ``dispatch`` never raises to callers.  Errors are encoded in the
    returned :class:`MutationResult`.
    """

    def __init__(self, context: SessionContext) -> None:
        self._ctx = context
        self._in_flight: set[int] = set()

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def dispatch(self, request: MutationRequest) -> MutationResult:
        """Run one mutation through the gate, the gateway and the refresh."""
        new_trace_id()
        op = request.operation
        ctx = self._ctx

        # 1. Capability gate (local, no gateway call)
        if not ctx.resolver.resolved:
            return self._fail(
                request, FailureKind.UNAUTHORIZED,
                "no role resolved; the session has not been started",
            )
        permitted = ctx.permitted_operations()
        if op not in permitted:
            logger.warning(
                "Gate denied %s for role=%s paused=%s",
                op.value, ctx.role.value, ctx.paused,
            )
            return self._fail(
                request, FailureKind.UNAUTHORIZED,
                f"not permitted for role {ctx.role.value}"
                + (" while paused" if ctx.paused else ""),
            )

        # 2. One action per item at a time
        item_id = request.item_id
        if item_id is not None and item_id in self._in_flight:
            return self._fail(
                request, FailureKind.REJECTED,
                f"another operation on item {item_id} is still in flight",
            )

        # 3. Attached value, from the mirror as it is right now
        value = 0
        if op == Operation.PURCHASE:
            price = ctx.mirror.price_of(item_id) if item_id is not None else None
            if price is None:
                return self._fail(
                    request, FailureKind.REJECTED,
                    f"item {item_id} is not in the inventory mirror",
                )
            try:
                quantity = int(request.args[1])
            except (IndexError, TypeError, ValueError):
                return self._fail(request, FailureKind.REJECTED, "quantity is required")
            value = price * quantity

        if item_id is not None:
            self._in_flight.add(item_id)
        try:
            return await self._submit(request, self._ledger_args(request), value)
        finally:
            if item_id is not None:
                self._in_flight.discard(item_id)

    def in_flight(self) -> frozenset[int]:
        """Item ids with a mutation currently in progress."""
        return frozenset(self._in_flight)

    # ------------------------------------------------------------------
    # Operation helpers
    # ------------------------------------------------------------------

    async def add_item(self, name: str, stock: int, price: int, threshold: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.ADD_ITEM, args=(name, stock, price, threshold),
        ))

    async def purchase(self, item_id: int, quantity: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.PURCHASE, args=(item_id, quantity),
        ))

    async def restock(self, item_id: int, amount: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.RESTOCK, args=(item_id, amount),
        ))

    async def update_price(self, item_id: int, new_price: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.UPDATE_PRICE, args=(item_id, new_price),
        ))

    async def update_threshold(self, item_id: int, new_threshold: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.UPDATE_THRESHOLD, args=(item_id, new_threshold),
        ))

    async def remove_item(self, item_id: int) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.REMOVE_ITEM, args=(item_id,),
        ))

    async def update_staff(self, address: str, add: bool) -> MutationResult:
        return await self.dispatch(MutationRequest(
            operation=Operation.UPDATE_STAFF, args=(address, add),
        ))

    async def withdraw(self) -> MutationResult:
        return await self.dispatch(MutationRequest(operation=Operation.WITHDRAW))

    async def pause(self) -> MutationResult:
        return await self.dispatch(MutationRequest(operation=Operation.PAUSE))

    async def unpause(self) -> MutationResult:
        return await self.dispatch(MutationRequest(operation=Operation.UNPAUSE))

    async def toggle_pause(self) -> MutationResult:
        """Pause if running, unpause if paused (by the mirrored flag)."""
        return await (self.unpause() if self._ctx.paused else self.pause())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _ledger_args(request: MutationRequest) -> tuple[Any, ...]:
        if request.operation == Operation.PAUSE:
            return (True,)
        if request.operation == Operation.UNPAUSE:
            return (False,)
        return tuple(request.args)

    async def _submit(
        self, request: MutationRequest, args: tuple[Any, ...], value: int,
    ) -> MutationResult:
        op = request.operation
        ctx = self._ctx

        try:
            receipt: TxReceipt = await ctx.gateway.submit(
                op.ledger_method, args, ctx.account, value,
            )
        except Exception as exc:
            kind = classify_failure(exc)
            logger.warning(
                "Submit failed: op=%s kind=%s error=%s",
                op.value, kind.value, exc,
                exc_info=not isinstance(exc, InventoryClientError),
            )
            return self._fail(request, kind, str(exc), value=value, gateway_called=True)

        logger.info(
            "Confirmed %s (tx=%s, value=%d)", op.value, receipt.tx_hash, value,
        )

        problems: list[str] = []
        try:
            await ctx.refresh_inventory()
        except SyncError as exc:
            problems.append(str(exc))

        if op == Operation.UPDATE_STAFF:
            try:
                await ctx.refresh_role()
            except QUERY_ERRORS as exc:
                logger.error("Role refresh after staff change failed: %s", exc)
                problems.append(f"role refresh failed: {exc}")
        elif op in (Operation.PAUSE, Operation.UNPAUSE):
            try:
                await ctx.refresh_pause()
            except QUERY_ERRORS as exc:
                logger.error("Pause refresh after toggle failed: %s", exc)
                problems.append(f"pause refresh failed: {exc}")

        return MutationResult(
            request_id=request.request_id,
            operation=op,
            success=True,
            value=value,
            receipt=receipt,
            gateway_called=True,
            refresh_error="; ".join(problems),
        )

    @staticmethod
    def _fail(
        request: MutationRequest,
        kind: FailureKind,
        error: str,
        *,
        value: int = 0,
        gateway_called: bool = False,
    ) -> MutationResult:
        return MutationResult(
            request_id=request.request_id,
            operation=request.operation,
            success=False,
            failure=kind,
            error=error,
            value=value,
            gateway_called=gateway_called,
        )
