"""Canonical ID and timestamp factories.

All modules import from here instead of defining local _uuid()/_now() copies.

Timestamp Rule
--------------
All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for all client-assigned IDs."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def same_account(a: str, b: str) -> bool:
    """Compare two account addresses ignoring case.

    Ledger nodes and wallets do not agree on checksum casing, so an
    address may come back in a different case than it was sent.
    """
    return a.lower() == b.lower()
