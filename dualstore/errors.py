"""
Error taxonomy for Dual Store Sync.

Startup-phase errors (connection, schema, migration source) are fatal and stop
the process. Request-phase errors are raised by the dual-write coordinator and
translated into HTTP responses by the API layer. Per-record migration errors
are collected into the migration report and never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DualStoreError(Exception):
    """Base class for all errors raised by this package."""


class StoreConnectionError(DualStoreError):
    """A backing store could not be reached at startup."""


class SchemaError(DualStoreError):
    """The relational schema could not be created."""


class StoreError(DualStoreError):
    """A single call against one of the stores failed."""

    def __init__(self, store: str, message: str) -> None:
        super().__init__(message)
        self.store = store
        self.message = message


class DuplicateRecordError(StoreError):
    """The relational store rejected a record on its uniqueness constraint."""


class RecordValidationError(DualStoreError):
    """Caller input or a stored document does not match the record schema."""


class MigrationError(DualStoreError):
    """Migration could not read one of its sources and startup is strict."""


class WriteStage(str, Enum):
    DOCUMENT = "document"
    RELATIONAL = "relational"


class WriteState(str, Enum):
    """States of a single dual write."""

    PENDING = "pending"
    DOCUMENT_WRITTEN = "document_written"
    BOTH_WRITTEN = "both_written"
    PARTIALLY_WRITTEN = "partially_written"
    FAILED = "failed"


class WriteStageError(DualStoreError):
    """
    A dual write stopped at ``stage``.

    ``state`` is the terminal state the write was left in: ``FAILED`` when the
    document store rejected the record (nothing was written) or
    ``PARTIALLY_WRITTEN`` when only the document store holds it.
    """

    def __init__(self, stage: WriteStage, cause: Exception, state: WriteState) -> None:
        super().__init__(str(cause))
        self.stage = stage
        self.cause = cause
        self.state = state

    @property
    def inconsistent(self) -> bool:
        return self.state is WriteState.PARTIALLY_WRITTEN


@dataclass(frozen=True)
class MigrationRecordError:
    """A document that could not be decoded or copied during migration."""

    kind: str
    source_id: Optional[str]
    message: str

    def to_dict(self) -> dict:
        return {"kind": self.kind, "source_id": self.source_id, "message": self.message}


__all__ = [
    "DualStoreError",
    "StoreConnectionError",
    "SchemaError",
    "StoreError",
    "DuplicateRecordError",
    "RecordValidationError",
    "MigrationError",
    "MigrationRecordError",
    "WriteStage",
    "WriteState",
    "WriteStageError",
]
