"""Inventory mirror: full-snapshot local copy of the ledger's items.

Every refresh pulls the complete item table in one bulk query and replaces
the local mapping in a single assignment.  The mirror is never patched from
events and never computes stock or price deltas itself.

A refresh is all-or-nothing: if the query fails or the snapshot is
malformed, ``SyncError`` is raised and the previous mapping is kept.  Two
overlapping refreshes are not serialised; whichever completes last wins.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from ledger_inventory.core.errors import QUERY_ERRORS, SyncError
from ledger_inventory.core.ids import utc_now
from ledger_inventory.core.interfaces import IContractGateway
from ledger_inventory.core.models import InventoryItem, ItemSnapshot

logger = logging.getLogger(__name__)


def build_mapping(snapshot: ItemSnapshot) -> dict[int, InventoryItem]:
    """Zip a bulk snapshot positionally into ``id -> InventoryItem``.

    Raises ``SyncError`` on unequal sequence lengths or invalid records.
    A repeated id keeps the later position.
    """
    lengths = snapshot.lengths()
    if len(set(lengths.values())) > 1:
        raise SyncError(f"snapshot sequences differ in length: {lengths}")

    mapping: dict[int, InventoryItem] = {}
    rows = zip(
        snapshot.ids,
        snapshot.names,
        snapshot.stocks,
        snapshot.prices,
        snapshot.thresholds,
    )
    for item_id, name, stock, price, threshold in rows:
        try:
            item = InventoryItem(
                id=item_id, name=name, stock=stock, price=price, threshold=threshold,
            )
        except ValidationError as exc:
            raise SyncError(f"invalid item record id={item_id}: {exc}") from exc
        mapping[item.id] = item
    return mapping


class InventoryMirror:
    """Session-owned read model of the ledger inventory."""

    def __init__(self) -> None:
        self._items: dict[int, InventoryItem] = {}
        self._last_refreshed_at: datetime | None = None
        self._refresh_count = 0

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, gateway: IContractGateway) -> dict[int, InventoryItem]:
        """Replace the whole mapping with the ledger's current snapshot.

        Returns the new mapping.  Not retried on failure; the caller may
        re-trigger.
        """
        try:
            snapshot = await gateway.query_all_items()
        except QUERY_ERRORS as exc:
            logger.error("Inventory snapshot query failed: %s", exc)
            raise SyncError(f"snapshot query failed: {exc}") from exc

        try:
            mapping = build_mapping(snapshot)
        except SyncError as exc:
            logger.error("Rejected inventory snapshot: %s", exc)
            raise

        self._items = mapping
        self._last_refreshed_at = utc_now()
        self._refresh_count += 1
        logger.debug("Inventory mirror refreshed (%d items)", len(mapping))
        return mapping

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def items(self) -> list[InventoryItem]:
        """Mirrored items ordered by id."""
        return [self._items[k] for k in sorted(self._items)]

    def get(self, item_id: int) -> InventoryItem | None:
        return self._items.get(item_id)

    def price_of(self, item_id: int) -> int | None:
        item = self._items.get(item_id)
        return item.price if item is not None else None

    def snapshot(self) -> dict[int, InventoryItem]:
        """Copy of the current mapping."""
        return dict(self._items)

    @property
    def last_refreshed_at(self) -> datetime | None:
        return self._last_refreshed_at

    @property
    def refresh_count(self) -> int:
        return self._refresh_count

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items
