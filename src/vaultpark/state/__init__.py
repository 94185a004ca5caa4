"""Session persistence interface and scan bookkeeping."""

from vaultpark.state.policy import ConsumedTokens, ScanDebouncer
from vaultpark.state.store import InMemorySessionStore, SessionStore

__all__ = [
    "ConsumedTokens",
    "InMemorySessionStore",
    "ScanDebouncer",
    "SessionStore",
]
