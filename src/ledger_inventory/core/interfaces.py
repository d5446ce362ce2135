"""Protocol interfaces for the inventory client.

All external boundaries are defined here as Protocol classes.  The session
core depends only on these; gateways (paper or remote) are swappable.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Protocol, runtime_checkable

from .enums import EventKind
from .events import LedgerEvent
from .models import ItemSnapshot, TxReceipt


# ---------------------------------------------------------------------------
# Contract Gateway
# ---------------------------------------------------------------------------

@runtime_checkable
class IContractGateway(Protocol):
    """Typed call/transaction interface to the inventory ledger.

    The only component that performs I/O against the ledger.

    View calls raise ``RemoteUnavailable`` or ``CallReverted``.
    ``submit`` raises ``Rejected``, ``Reverted``, ``InsufficientFunds``,
    ``Unauthorized`` or ``RemoteUnavailable``.  A submit is not idempotent:
    callers must never resubmit one that may have partially succeeded.
    """

    async def query_owner(self) -> str: ...

    async def query_staff(self, account: str) -> bool: ...

    async def query_paused(self) -> bool: ...

    async def query_all_items(self) -> ItemSnapshot: ...

    async def submit(
        self,
        method: str,
        args: tuple[Any, ...],
        from_account: str,
        value: int = 0,
    ) -> TxReceipt: ...

    def subscribe(self, kind: EventKind) -> AsyncIterator[LedgerEvent]:
        """Lazy, infinite, non-restartable stream of events of one kind."""
        ...


# ---------------------------------------------------------------------------
# Identity provider
# ---------------------------------------------------------------------------

@runtime_checkable
class IIdentityProvider(Protocol):
    """Wallet/signing collaborator that exposes the active account.

    Raises ``NoProvider`` or ``UserRejected``.
    """

    async def request_active_account(self) -> str: ...
