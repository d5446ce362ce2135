"""Capability gate: which mutating operations may be attempted.

A pure function of (role, paused).  It decides only what the client
offers; the ledger remains the final authority and may still reject.
Self-service purchase is a public-only affordance by policy, so owners and
staff are never offered it.
"""

from __future__ import annotations

from ledger_inventory.core.enums import Operation, Role

_NONE: frozenset[Operation] = frozenset()

_OWNER_ACTIVE: frozenset[Operation] = frozenset({
    Operation.ADD_ITEM,
    Operation.RESTOCK,
    Operation.UPDATE_PRICE,
    Operation.UPDATE_THRESHOLD,
    Operation.REMOVE_ITEM,
    Operation.UPDATE_STAFF,
    Operation.WITHDRAW,
    Operation.PAUSE,
})

# While paused only staff management, withdrawal and unpause remain
_OWNER_PAUSED: frozenset[Operation] = frozenset({
    Operation.UPDATE_STAFF,
    Operation.WITHDRAW,
    Operation.UNPAUSE,
})

CAPABILITY_TABLE: dict[tuple[Role, bool], frozenset[Operation]] = {
    (Role.OWNER, False): _OWNER_ACTIVE,
    (Role.OWNER, True): _OWNER_PAUSED,
    (Role.STAFF, False): frozenset({Operation.RESTOCK}),
    (Role.STAFF, True): _NONE,
    (Role.PUBLIC, False): frozenset({Operation.PURCHASE}),
    (Role.PUBLIC, True): _NONE,
}


def permitted_operations(role: Role, paused: bool) -> frozenset[Operation]:
    """Return the operations the client may attempt for *role* and *paused*."""
    return CAPABILITY_TABLE[(Role(role), bool(paused))]


def is_permitted(role: Role, paused: bool, operation: Operation) -> bool:
    return operation in permitted_operations(role, paused)
