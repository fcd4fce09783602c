# Storage module - claim stores and document storage
from .base import ClaimStore
from .memory import InMemoryClaimStore
from .sqlite import SQLiteClaimStore
from .documents import DocumentStorage

__all__ = ["ClaimStore", "InMemoryClaimStore", "SQLiteClaimStore", "DocumentStorage", "build_claim_store"]


def build_claim_store(database_path=None) -> ClaimStore:
    """SQLite store when a database path is configured, in-memory otherwise."""
    if database_path:
        return SQLiteClaimStore(database_path)
    return InMemoryClaimStore()
