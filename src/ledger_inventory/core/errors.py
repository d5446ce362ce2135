"""Custom exception hierarchy for the inventory client."""


class InventoryClientError(Exception):
    """Base exception for all inventory client errors."""


# --- Configuration ---
class ConfigError(InventoryClientError):
    """Invalid or missing configuration."""


# --- Permissions ---
class Unauthorized(InventoryClientError):
    """Operation denied by the capability gate or by the ledger."""


# --- Remote ---
class RemoteUnavailable(InventoryClientError):
    """Ledger or identity provider could not be reached."""


class NoProvider(RemoteUnavailable):
    """No identity provider (wallet) is available."""


class UserRejected(RemoteUnavailable):
    """The user declined to expose an account."""


# --- Mirror ---
class SyncError(InventoryClientError):
    """Bulk snapshot was malformed or could not be fetched."""


# --- Submitted transactions ---
class OperationFailed(InventoryClientError):
    """A submitted transaction did not confirm."""


class Rejected(OperationFailed):
    """Rejected by the signer or refused before reaching the ledger."""


class Reverted(OperationFailed):
    """The ledger reverted the transaction."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(f"reverted: {reason}" if reason else "reverted")


class CallReverted(Reverted):
    """A view call reverted."""


class InsufficientFunds(OperationFailed):
    """The sending account cannot cover the attached value or gas."""


# Failures a ledger query may raise: client errors plus raw transport errors
# from the underlying connection.
QUERY_ERRORS: tuple[type[Exception], ...] = (
    InventoryClientError,
    ConnectionError,
    TimeoutError,
)
