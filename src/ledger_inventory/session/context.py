"""Session context: the explicit owner of all per-session state.

Holds the active account and role, the pause flag, the inventory mirror and
the event log, and is passed to every component instead of ambient globals.
Initialisation order is fixed: identity -> role -> pause flag -> mirror,
then the event aggregator starts.  Teardown stops the aggregator and drops
the context; nothing is persisted.
"""

from __future__ import annotations

import logging
from types import TracebackType

from ledger_inventory.core.enums import Operation, Role
from ledger_inventory.core.errors import SyncError
from ledger_inventory.core.interfaces import IContractGateway, IIdentityProvider
from ledger_inventory.events.aggregator import EventAggregator
from ledger_inventory.events.event_log import DEFAULT_CAPACITY, EventLog

from .capabilities import permitted_operations
from .dispatcher import MutationDispatcher
from .identity import RoleResolver
from .mirror import InventoryMirror

logger = logging.getLogger(__name__)


class SessionContext:
    """All state for one client session against one ledger.

    Usage::

        async with SessionContext(gateway, identity) as session:
            result = await session.dispatcher.purchase(1, 2)
    """

    def __init__(
        self,
        gateway: IContractGateway,
        identity: IIdentityProvider,
        event_log_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.gateway = gateway
        self.resolver = RoleResolver(gateway, identity)
        self.mirror = InventoryMirror()
        self.event_log = EventLog(event_log_capacity)
        self.aggregator = EventAggregator(gateway, self.event_log)
        self.dispatcher = MutationDispatcher(self)
        self.paused = False
        self.last_sync_error: str = ""
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initialise from the ledger and start observing events.

        Identity and role failures propagate: without them the session
        cannot gate anything.  An initial mirror failure is logged and kept
        in ``last_sync_error``; the mirror stays empty until a refresh
        succeeds.
        """
        if self._started:
            return
        await self.resolver.resolve()
        await self.refresh_pause()
        try:
            await self.refresh_inventory()
        except SyncError as exc:
            logger.error("Initial inventory load failed: %s", exc)
        await self.aggregator.start()
        self._started = True
        logger.info(
            "Session started (account=%s, role=%s, paused=%s, items=%d)",
            self.account, self.role.value, self.paused, len(self.mirror),
        )

    async def close(self) -> None:
        if self.aggregator.running:
            await self.aggregator.stop()
        self._started = False

    async def __aenter__(self) -> SessionContext:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def account(self) -> str:
        return self.resolver.account

    @property
    def role(self) -> Role:
        return self.resolver.role

    def permitted_operations(self) -> frozenset[Operation]:
        """Capability gate output for the current role and pause flag."""
        return permitted_operations(self.role, self.paused)

    # ------------------------------------------------------------------
    # Refresh entry points (never retried automatically)
    # ------------------------------------------------------------------

    async def refresh_role(self) -> Role:
        return await self.resolver.refresh()

    async def refresh_pause(self) -> bool:
        self.paused = await self.gateway.query_paused()
        return self.paused

    async def refresh_inventory(self) -> None:
        """Full mirror reload.  Raises ``SyncError``; the old mirror stays."""
        try:
            await self.mirror.refresh(self.gateway)
        except SyncError as exc:
            self.last_sync_error = str(exc)
            raise
        self.last_sync_error = ""
