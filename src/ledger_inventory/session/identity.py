"""Identity and role resolution.

The role is derived from the ledger at session start and re-derived only
when asked (``refresh``) or after a staff-roster change made by this
session.  StaffAdded/StaffRemoved events from other sessions do not trigger
a refresh: events are not authoritative for permissions.
"""

from __future__ import annotations

import logging

from ledger_inventory.core.enums import Role
from ledger_inventory.core.ids import same_account
from ledger_inventory.core.interfaces import IContractGateway, IIdentityProvider

logger = logging.getLogger(__name__)


class RoleResolver:
    """Determines the active account and its role.

    Parameters
    ----------
    gateway:
        Ledger gateway used for the owner and staff queries.
    identity:
        Wallet collaborator supplying the active account.
    """

    def __init__(self, gateway: IContractGateway, identity: IIdentityProvider) -> None:
        self._gateway = gateway
        self._identity = identity
        self._account: str | None = None
        self._role: Role | None = None

    @property
    def resolved(self) -> bool:
        return self._role is not None

    @property
    def account(self) -> str:
        if self._account is None:
            raise RuntimeError("RoleResolver.resolve() has not run")
        return self._account

    @property
    def role(self) -> Role:
        if self._role is None:
            raise RuntimeError("RoleResolver.resolve() has not run")
        return self._role

    async def resolve(self) -> Role:
        """Request the active account, then derive its role from the ledger.

        Raises ``NoProvider``/``UserRejected`` from the identity provider and
        ``RemoteUnavailable``/``CallReverted`` from the gateway.  On failure
        the previously resolved account and role are kept.
        """
        account = await self._identity.request_active_account()
        role = await self._role_for(account)
        self._account, self._role = account, role
        logger.info("Resolved role %s for account %s", role.value, account)
        return role

    async def refresh(self) -> Role:
        """Re-derive the role of the already-known account."""
        if self._account is None:
            return await self.resolve()
        role = await self._role_for(self._account)
        if role != self._role:
            logger.info(
                "Role changed for %s: %s -> %s",
                self._account,
                self._role.value if self._role else None,
                role.value,
            )
        self._role = role
        return role

    async def _role_for(self, account: str) -> Role:
        owner = await self._gateway.query_owner()
        if same_account(account, owner):
            return Role.OWNER
        if await self._gateway.query_staff(account):
            return Role.STAFF
        return Role.PUBLIC
