"""Client for a ledger-backed inventory service."""
