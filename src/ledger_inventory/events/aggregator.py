"""Event aggregator: one listener task per event kind feeding a single log.

Each listener iterates its own gateway subscription, stamps every arrival
with a client id and receipt time, and hands it to a shared queue.  A single
sink task drains the queue into the :class:`EventLog`, so the log order is
arrival order across all kinds.  There is no ordering guarantee between
kinds and no deduplication: a redelivered event is logged twice.

Subscriptions are not restartable.  A listener whose stream ends or fails
is logged and left stopped while the others keep running.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable

from ledger_inventory.core.enums import EventKind
from ledger_inventory.core.events import DomainEvent, LedgerEvent
from ledger_inventory.core.interfaces import IContractGateway

from .event_log import EventLog

logger = logging.getLogger(__name__)


class EventAggregator:
    """Concurrent subscriber to the ledger's event streams.

    Parameters
    ----------
    gateway:
        Gateway providing ``subscribe(kind)``.
    event_log:
        Sink for observed events.
    kinds:
        Event kinds to subscribe to (default: all eleven).
    """

    def __init__(
        self,
        gateway: IContractGateway,
        event_log: EventLog,
        kinds: Iterable[EventKind] = tuple(EventKind),
    ) -> None:
        self._gateway = gateway
        self._log = event_log
        self._kinds = tuple(kinds)
        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue()
        self._listeners: dict[EventKind, asyncio.Task[None]] = {}
        self._sink: asyncio.Task[None] | None = None
        self._running = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open every subscription and start the listener and sink tasks."""
        if self._running:
            logger.warning("EventAggregator is already running")
            return
        self._running = True
        self._sink = asyncio.create_task(self._drain(), name="event-log-sink")
        for kind in self._kinds:
            stream = self._gateway.subscribe(kind)
            self._listeners[kind] = asyncio.create_task(
                self._listen(kind, stream), name=f"event-listener-{kind.value}",
            )
        logger.info("EventAggregator started (%d subscriptions)", len(self._listeners))

    async def stop(self) -> None:
        """Cancel all listeners, flush what already arrived, stop the sink."""
        self._running = False
        listeners = list(self._listeners.values())
        for task in listeners:
            task.cancel()
        await asyncio.gather(*listeners, return_exceptions=True)
        self._listeners.clear()

        if self._sink is not None:
            self._sink.cancel()
            try:
                await self._sink
            except asyncio.CancelledError:
                pass
            self._sink = None

        while not self._queue.empty():
            self._log.insert(self._queue.get_nowait())
            self._queue.task_done()
        logger.info("EventAggregator stopped")

    @property
    def running(self) -> bool:
        return self._running

    def active_subscriptions(self) -> list[EventKind]:
        """Kinds whose listener is still consuming its stream."""
        return [k for k, t in self._listeners.items() if not t.done()]

    async def flush(self) -> None:
        """Wait until every event already handed over is in the log."""
        await self._queue.join()

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def _listen(self, kind: EventKind, stream: AsyncIterator[LedgerEvent]) -> None:
        try:
            async for raw in stream:
                await self._queue.put(DomainEvent.arrived(raw))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Subscription %s failed; it will not be restarted", kind.value)
        else:
            logger.warning("Subscription %s ended", kind.value)

    async def _drain(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self._log.insert(event)
            finally:
                self._queue.task_done()
            logger.debug("Observed %s: %s", event.kind.value, event.message)
