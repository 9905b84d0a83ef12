"""
Store interfaces and shared result types for Dual Store Sync.

Concrete adapters (MongoDB document store, PostgreSQL relational store) and
the in-memory fakes used in tests implement these Protocols, so the
coordinator and the migrator depend only on the contracts below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Generic,
    Iterator,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Type,
    TypeVar,
    runtime_checkable,
)

from pydantic import BaseModel, ValidationError

from dualstore.domain.models import Product, User
from dualstore.errors import RecordValidationError

RecordT = TypeVar("RecordT", bound=BaseModel)


class InsertStatus(str, Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DecodedDocument(Generic[RecordT]):
    """
    One source document, decoded into a record or carrying the decode error.
    """

    source_id: Optional[str]
    record: Optional[RecordT] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class DocumentSequence(Generic[RecordT]):
    """
    Finite, restartable sequence over documents materialized at call time.

    Decoding happens during iteration so a malformed document surfaces as a
    failed `DecodedDocument` instead of interrupting the whole pass.
    """

    def __init__(self, documents: Sequence[Mapping[str, Any]], model: Type[RecordT]) -> None:
        self._documents = list(documents)
        self._model = model

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[DecodedDocument[RecordT]]:
        for doc in self._documents:
            source_id = str(doc["_id"]) if "_id" in doc else None
            try:
                record = decode_record(self._model, doc)
            except RecordValidationError as exc:
                yield DecodedDocument(source_id=source_id, error=str(exc))
                continue
            yield DecodedDocument(source_id=source_id, record=record)


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def decode_record(model: Type[RecordT], document: Mapping[str, Any]) -> RecordT:
    """Validate one stored document against `model`, raising `RecordValidationError`."""
    try:
        return model.model_validate(dict(document))
    except ValidationError as exc:
        raise RecordValidationError(_summarize(exc)) from exc


@runtime_checkable
class DocumentStore(Protocol):
    """Append-only document store; also the migration source."""

    def insert_user(self, user: User, timeout: Optional[float] = None) -> None: ...

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> None: ...

    def list_users(self, timeout: Optional[float] = None) -> DocumentSequence[User]: ...

    def list_products(self, timeout: Optional[float] = None) -> DocumentSequence[Product]: ...

    def close(self) -> None: ...


@runtime_checkable
class RelationalStore(Protocol):
    """Schema-enforced store; users are unique by email."""

    def insert_user(
        self,
        user: User,
        timeout: Optional[float] = None,
        skip_duplicates: bool = False,
    ) -> InsertStatus: ...

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> InsertStatus: ...

    def close(self) -> None: ...


@runtime_checkable
class SchemaManager(Protocol):
    def ensure_schema(self) -> None: ...


__all__ = [
    "InsertStatus",
    "DecodedDocument",
    "DocumentSequence",
    "decode_record",
    "DocumentStore",
    "RelationalStore",
    "SchemaManager",
]
