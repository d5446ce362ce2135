"""Shared fixtures for the ledger-inventory test suite."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import pytest

from ledger_inventory.core.config import SeedItem
from ledger_inventory.gateway.identity import StaticIdentityProvider
from ledger_inventory.gateway.paper import PaperLedgerGateway
from ledger_inventory.session.context import SessionContext

OWNER = "0xAbCdEf0000000000000000000000000000000001"
STAFF = "0x00000000000000000000000000000000000000b2"
BUYER = "0x00000000000000000000000000000000000000c3"


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

@pytest.fixture
def seed_items() -> list[SeedItem]:
    """Widget (id 1) and Gadget (id 2)."""
    return [
        SeedItem(name="Widget", stock=5, price=100, threshold=2),
        SeedItem(name="Gadget", stock=20, price=250, threshold=5),
    ]


@pytest.fixture
def paper_ledger(seed_items) -> PaperLedgerGateway:
    """Unpaused paper ledger with one owner, one staff member, two items."""
    return PaperLedgerGateway(owner=OWNER, staff=[STAFF], items=seed_items)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@pytest.fixture
async def open_session():
    """Factory: start a session for an account; all are closed at teardown."""
    sessions: list[SessionContext] = []

    async def _open(gateway, account: str, capacity: int = 100) -> SessionContext:
        session = SessionContext(
            gateway, StaticIdentityProvider(account), event_log_capacity=capacity,
        )
        await session.start()
        sessions.append(session)
        return session

    yield _open

    for session in sessions:
        await session.close()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Poll a predicate on the event loop until it holds (or time out)."""

    async def _wait(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0.001)

        await asyncio.wait_for(_poll(), timeout)

    return _wait


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def staff() -> str:
    return STAFF


@pytest.fixture
def buyer() -> str:
    return BUYER
