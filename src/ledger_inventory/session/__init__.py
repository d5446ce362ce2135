"""Session core: identity and role, capability gate, mirror, dispatcher.

:class:`SessionContext` wires them together and owns their state.
"""

from ledger_inventory.session.capabilities import (
    CAPABILITY_TABLE,
    is_permitted,
    permitted_operations,
)
from ledger_inventory.session.context import SessionContext
from ledger_inventory.session.dispatcher import MutationDispatcher, classify_failure
from ledger_inventory.session.identity import RoleResolver
from ledger_inventory.session.mirror import InventoryMirror, build_mapping

__all__ = [
    "CAPABILITY_TABLE",
    "InventoryMirror",
    "MutationDispatcher",
    "RoleResolver",
    "SessionContext",
    "build_mapping",
    "classify_failure",
    "is_permitted",
    "permitted_operations",
]
