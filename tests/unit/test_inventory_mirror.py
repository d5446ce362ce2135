"""Test InventoryMirror full-snapshot refresh semantics."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_inventory.core.errors import CallReverted, RemoteUnavailable, SyncError
from ledger_inventory.core.models import ItemSnapshot
from ledger_inventory.session.mirror import InventoryMirror, build_mapping


def _snapshot(*rows) -> ItemSnapshot:
    """rows: (id, name, stock, price, threshold)"""
    return ItemSnapshot(
        ids=[r[0] for r in rows],
        names=[r[1] for r in rows],
        stocks=[r[2] for r in rows],
        prices=[r[3] for r in rows],
        thresholds=[r[4] for r in rows],
    )


def _gateway(snapshot=None, side_effect=None):
    gateway = MagicMock()
    gateway.query_all_items = AsyncMock(return_value=snapshot, side_effect=side_effect)
    return gateway


class _GatedGateway:
    """Returns a queued snapshot per call, released by the test in any order."""

    def __init__(self) -> None:
        self.pending: list[tuple[asyncio.Event, ItemSnapshot]] = []

    def enqueue(self, snapshot: ItemSnapshot) -> asyncio.Event:
        release = asyncio.Event()
        self.pending.append((release, snapshot))
        return release

    async def query_all_items(self) -> ItemSnapshot:
        release, snapshot = self.pending.pop(0)
        await release.wait()
        return snapshot


class TestRefresh:
    async def test_zips_parallel_sequences(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot(
            (1, "Widget", 5, 100, 2),
            (2, "Gadget", 20, 250, 5),
        )))

        assert len(mirror) == 2
        widget = mirror.get(1)
        assert widget.name == "Widget"
        assert widget.stock == 5
        assert widget.price == 100
        assert widget.threshold == 2
        assert mirror.price_of(2) == 250
        assert mirror.refresh_count == 1
        assert mirror.last_refreshed_at is not None

    async def test_full_replace_drops_removed_items(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((1, "A", 1, 1, 0), (2, "B", 1, 1, 0))))
        await mirror.refresh(_gateway(_snapshot((2, "B", 9, 1, 0))))

        assert 1 not in mirror
        assert mirror.get(2).stock == 9

    async def test_empty_snapshot_empties_mirror(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((1, "A", 1, 1, 0))))
        await mirror.refresh(_gateway(ItemSnapshot()))
        assert len(mirror) == 0

    async def test_duplicate_ids_keep_later_position(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((7, "old", 1, 10, 0), (7, "new", 2, 20, 0))))
        assert len(mirror) == 1
        assert mirror.get(7).name == "new"

    async def test_items_ordered_by_id(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((3, "c", 0, 0, 0), (1, "a", 0, 0, 0))))
        assert [i.id for i in mirror.items()] == [1, 3]


class TestRefreshFailure:
    async def test_mismatched_lengths_raise_and_keep_previous(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((1, "Widget", 5, 100, 2))))
        before = mirror.snapshot()

        ragged = ItemSnapshot(
            ids=[1, 2], names=["A"], stocks=[1, 2], prices=[1, 2], thresholds=[0, 0],
        )
        with pytest.raises(SyncError, match="differ in length"):
            await mirror.refresh(_gateway(ragged))

        assert mirror.snapshot() == before
        assert mirror.refresh_count == 1

    @pytest.mark.parametrize("exc", [
        RemoteUnavailable("down"),
        CallReverted("getAllItems"),
        ConnectionError("node reset"),
        TimeoutError("slow"),
    ])
    async def test_query_failure_becomes_sync_error(self, exc):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((1, "Widget", 5, 100, 2))))

        with pytest.raises(SyncError):
            await mirror.refresh(_gateway(side_effect=exc))
        assert mirror.get(1).stock == 5

    async def test_invalid_record_rejects_whole_snapshot(self):
        mirror = InventoryMirror()
        await mirror.refresh(_gateway(_snapshot((1, "Widget", 5, 100, 2))))

        with pytest.raises(SyncError, match="invalid item record"):
            await mirror.refresh(_gateway(_snapshot((1, "A", 3, 1, 0), (2, "B", -1, 1, 0))))
        assert mirror.get(1).stock == 5
        assert 2 not in mirror


class TestConcurrentRefresh:
    async def test_last_completion_wins(self):
        mirror = InventoryMirror()
        gateway = _GatedGateway()
        first = gateway.enqueue(_snapshot((1, "first", 1, 1, 0)))
        second = gateway.enqueue(_snapshot((2, "second", 2, 2, 0)))

        t1 = asyncio.create_task(mirror.refresh(gateway))
        t2 = asyncio.create_task(mirror.refresh(gateway))
        await asyncio.sleep(0)

        # The call issued second completes first
        second.set()
        await t2
        first.set()
        await t1

        assert mirror.snapshot().keys() == {1}
        assert mirror.get(1).name == "first"

    async def test_in_issue_order_completion(self):
        mirror = InventoryMirror()
        gateway = _GatedGateway()
        first = gateway.enqueue(_snapshot((1, "first", 1, 1, 0)))
        second = gateway.enqueue(_snapshot((2, "second", 2, 2, 0)))

        t1 = asyncio.create_task(mirror.refresh(gateway))
        t2 = asyncio.create_task(mirror.refresh(gateway))
        await asyncio.sleep(0)
        first.set()
        await t1
        second.set()
        await t2

        assert mirror.snapshot().keys() == {2}


class TestBuildMapping:
    def test_empty(self):
        assert build_mapping(ItemSnapshot()) == {}

    def test_reports_all_lengths(self):
        with pytest.raises(SyncError) as info:
            build_mapping(ItemSnapshot(ids=[1], names=[], stocks=[], prices=[], thresholds=[]))
        assert "'ids': 1" in str(info.value)
