"""Static identity provider.

Serves a fixed account in place of a wallet.  Used by the paper CLI and in
tests; a browser or hardware wallet would implement the same protocol.
"""

from __future__ import annotations

import logging

from ledger_inventory.core.errors import NoProvider, UserRejected

logger = logging.getLogger(__name__)


class StaticIdentityProvider:
    """Identity provider that always returns the configured account.

    Parameters
    ----------
    account:
        Address to expose.  Empty or ``None`` behaves like a missing wallet.
    reject:
        Simulate the user declining the account request.
    """

    def __init__(self, account: str | None, reject: bool = False) -> None:
        self._account = account or ""
        self._reject = reject
        self.requests = 0

    async def request_active_account(self) -> str:
        self.requests += 1
        if not self._account:
            raise NoProvider("no identity provider configured")
        if self._reject:
            raise UserRejected("account request rejected by user")
        logger.debug("Active account provided: %s", self._account)
        return self._account
