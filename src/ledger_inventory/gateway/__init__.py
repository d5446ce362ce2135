"""Ledger gateways and identity providers.

The session core depends only on :class:`IContractGateway` and
:class:`IIdentityProvider`; this package holds the in-memory
implementations used for paper sessions and tests.
"""

from ledger_inventory.core.interfaces import IContractGateway, IIdentityProvider
from ledger_inventory.gateway.identity import StaticIdentityProvider
from ledger_inventory.gateway.paper import PaperLedgerGateway

__all__ = [
    "IContractGateway",
    "IIdentityProvider",
    "PaperLedgerGateway",
    "StaticIdentityProvider",
]
