"""
Dual Store Sync - keep a MongoDB document store and a PostgreSQL relational
store populated with the same records.

This package provides:

- Store adapters for MongoDB (pymongo) and PostgreSQL (psycopg pool)
- An idempotent relational schema initializer
- A one-shot bulk migrator copying existing documents into PostgreSQL
- A dual-write coordinator used by the HTTP API (FastAPI)

Writes across the two stores are best-effort and never transactional: a
record accepted by MongoDB and rejected by PostgreSQL stays in MongoDB and the
write is reported as partially written.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from dualstore.config import Settings, get_settings
from dualstore.coordinator import DualWriteCoordinator, PartialWrite, WriteOutcome
from dualstore.domain.models import Product, User
from dualstore.errors import (
    DualStoreError,
    DuplicateRecordError,
    MigrationError,
    MigrationRecordError,
    SchemaError,
    StoreConnectionError,
    StoreError,
    WriteStage,
    WriteStageError,
    WriteState,
)
from dualstore.migrator import BulkMigrator, MigrationReport
from dualstore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "User",
    "Product",
    # Core
    "BulkMigrator",
    "MigrationReport",
    "DualWriteCoordinator",
    "WriteOutcome",
    "PartialWrite",
    # Errors
    "DualStoreError",
    "DuplicateRecordError",
    "MigrationError",
    "MigrationRecordError",
    "SchemaError",
    "StoreConnectionError",
    "StoreError",
    "WriteStage",
    "WriteStageError",
    "WriteState",
    # Logging
    "configure_logging",
    "get_logger",
]
