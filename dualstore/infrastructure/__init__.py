"""
Infrastructure package for Dual Store Sync.

Centralizes store connectivity (MongoDB client, PostgreSQL pool) and their
lifecycle. Keep this layer focused on I/O and resource management, decoupled
from migration and dual-write logic.
"""

from dualstore.infrastructure.db_factory import (
    StoreHandles,
    connect_mongo,
    connect_postgres,
    open_stores,
)

__all__ = [
    "StoreHandles",
    "connect_mongo",
    "connect_postgres",
    "open_stores",
]
