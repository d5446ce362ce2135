"""Test the paper ledger's contract rules and emitted events."""

import pytest

from ledger_inventory.core.config import PaperLedgerConfig, SeedItem
from ledger_inventory.core.enums import EventKind
from ledger_inventory.core.errors import (
    InsufficientFunds,
    Rejected,
    RemoteUnavailable,
    Reverted,
    Unauthorized,
)
from ledger_inventory.gateway.paper import PaperLedgerGateway


class TestQueries:
    async def test_snapshot_is_parallel_sequences(self, paper_ledger):
        snap = await paper_ledger.query_all_items()
        assert snap.ids == [1, 2]
        assert snap.names == ["Widget", "Gadget"]
        assert snap.stocks == [5, 20]
        assert snap.prices == [100, 250]
        assert snap.thresholds == [2, 5]

    async def test_staff_lookup_is_case_insensitive(self, paper_ledger, staff):
        assert await paper_ledger.query_staff(staff.upper().replace("0X", "0x")) is True
        assert await paper_ledger.query_staff("0xnobody") is False

    async def test_offline_ledger_raises(self, paper_ledger):
        paper_ledger.set_available(False)
        with pytest.raises(RemoteUnavailable):
            await paper_ledger.query_owner()
        assert paper_ledger.call_count("query_owner") == 1

    def test_from_config(self):
        config = PaperLedgerConfig(
            owner="0xa1", staff=["0xb2"], paused=True,
            items=[SeedItem(name="Widget", stock=1, price=2, threshold=0)],
            balance=7,
        )
        ledger = PaperLedgerGateway.from_config(config)
        assert ledger.balance == 7


class TestPurchaseRules:
    async def test_exact_payment_decrements_stock(self, paper_ledger, buyer):
        receipt = await paper_ledger.submit("purchase", (1, 2), buyer, 200)

        snap = await paper_ledger.query_all_items()
        assert snap.stocks[0] == 3
        assert paper_ledger.balance == 200
        assert receipt.value == 200
        assert receipt.block_number == 1

    async def test_incorrect_payment_reverts(self, paper_ledger, buyer):
        with pytest.raises(Reverted, match="incorrect payment"):
            await paper_ledger.submit("purchase", (1, 2), buyer, 150)

    async def test_not_enough_stock(self, paper_ledger, buyer):
        with pytest.raises(Reverted, match="not enough stock"):
            await paper_ledger.submit("purchase", (1, 6), buyer, 600)

    async def test_unknown_item(self, paper_ledger, buyer):
        with pytest.raises(Reverted, match="does not exist"):
            await paper_ledger.submit("purchase", (9, 1), buyer, 100)

    async def test_wallet_shortfall(self, seed_items, owner, buyer):
        ledger = PaperLedgerGateway(owner=owner, items=seed_items, wallets={buyer: 50})
        with pytest.raises(InsufficientFunds):
            await ledger.submit("purchase", (1, 1), buyer, 100)

    async def test_purchase_crossing_threshold_emits_low_stock(self, paper_ledger, buyer):
        await paper_ledger.submit("purchase", (1, 3), buyer, 300)

        kinds = [e.kind for e in paper_ledger.emitted]
        assert kinds == [EventKind.ITEM_PURCHASED, EventKind.LOW_STOCK]
        low = paper_ledger.emitted[1]
        assert low.payload == {"item_id": 1, "stock": 2, "threshold": 2}


class TestRoleRules:
    async def test_staff_may_restock(self, paper_ledger, staff):
        await paper_ledger.submit("restock", (2, 5), staff)
        assert paper_ledger.emitted[-1].payload == {"item_id": 2, "new_stock": 25}

    async def test_public_may_not_restock(self, paper_ledger, buyer):
        with pytest.raises(Unauthorized):
            await paper_ledger.submit("restock", (2, 5), buyer)

    @pytest.mark.parametrize("method,args", [
        ("addItem", ("Thing", 1, 1, 0)),
        ("updatePrice", (1, 1)),
        ("updateThreshold", (1, 1)),
        ("removeItem", (1,)),
        ("updateStaff", ("0xnew", True)),
        ("setPaused", (True,)),
    ])
    async def test_owner_only_methods(self, paper_ledger, staff, method, args):
        with pytest.raises(Unauthorized):
            await paper_ledger.submit(method, args, staff)

    async def test_owner_match_ignores_case(self, paper_ledger, owner):
        await paper_ledger.submit("updatePrice", (1, 120), owner.lower())
        assert paper_ledger.emitted[-1].kind == EventKind.PRICE_UPDATED


class TestPause:
    async def test_paused_blocks_item_mutations(self, paper_ledger, owner, staff):
        await paper_ledger.submit("setPaused", (True,), owner)
        with pytest.raises(Reverted, match="paused"):
            await paper_ledger.submit("restock", (1, 1), staff)

    async def test_staff_management_allowed_while_paused(self, paper_ledger, owner):
        await paper_ledger.submit("setPaused", (True,), owner)
        await paper_ledger.submit("updateStaff", ("0xnew", True), owner)
        assert await paper_ledger.query_staff("0xNEW") is True

    async def test_pause_to_same_state_reverts(self, paper_ledger, owner):
        with pytest.raises(Reverted, match="not paused"):
            await paper_ledger.submit("setPaused", (False,), owner)


class TestOtherMethods:
    async def test_add_item_assigns_next_id(self, paper_ledger, owner):
        await paper_ledger.submit("addItem", ("Sprocket", 3, 40, 1), owner)
        event = paper_ledger.emitted[-1]
        assert event.kind == EventKind.ITEM_ADDED
        assert event.payload == {"item_id": 3, "name": "Sprocket", "stock": 3, "price": 40}

    async def test_remove_item_emits_nothing(self, paper_ledger, owner):
        await paper_ledger.submit("removeItem", (1,), owner)
        assert paper_ledger.emitted == []
        assert (await paper_ledger.query_all_items()).ids == [2]

    async def test_withdraw_empties_balance(self, paper_ledger, owner, buyer):
        await paper_ledger.submit("purchase", (2, 1), buyer, 250)
        await paper_ledger.submit("withdraw", (), owner)
        assert paper_ledger.balance == 0
        assert paper_ledger.emitted[-1].payload == {"owner": owner, "amount": 250}

    async def test_withdraw_with_nothing_reverts(self, paper_ledger, owner):
        with pytest.raises(Reverted, match="no funds"):
            await paper_ledger.submit("withdraw", (), owner)

    async def test_value_on_non_payable_reverts(self, paper_ledger, owner):
        with pytest.raises(Reverted, match="not payable"):
            await paper_ledger.submit("restock", (1, 1), owner, 10)

    async def test_unknown_method_rejected(self, paper_ledger, owner):
        with pytest.raises(Rejected):
            await paper_ledger.submit("selfDestruct", (), owner)

    async def test_wrong_arity_rejected(self, paper_ledger, owner):
        with pytest.raises(Rejected, match="bad arguments"):
            await paper_ledger.submit("restock", (1,), owner)

    async def test_events_carry_block_and_tx(self, paper_ledger, owner):
        receipt = await paper_ledger.submit("updateThreshold", (2, 1), owner)
        event = paper_ledger.emitted[-1]
        assert event.tx_hash == receipt.tx_hash
        assert event.block_number == receipt.block_number
