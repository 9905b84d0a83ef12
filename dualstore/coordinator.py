"""
Dual-write coordinator: persist one record to both stores.

The write is sequential and not transactional. The document store is written
first; a failure there aborts before the relational store is touched. A
relational failure after a successful document write is NOT rolled back: the
record then exists in MongoDB only, the write ends `PARTIALLY_WRITTEN`, and a
`PartialWrite` event is emitted so the inconsistency is observable.

    coordinator = DualWriteCoordinator(document_store, relational_store)
    outcome = coordinator.write_user(User(name="A", email="a@x.com", password="p"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel

from dualstore.domain.models import Product, User
from dualstore.errors import DualStoreError, WriteStage, WriteStageError, WriteState
from dualstore.stores.abstract import DocumentStore, RelationalStore
from dualstore.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class WriteOutcome:
    kind: str
    state: WriteState

    @property
    def success(self) -> bool:
        return self.state is WriteState.BOTH_WRITTEN


@dataclass(frozen=True)
class PartialWrite:
    """Reconciliation event: `record` is in the document store only."""

    kind: str
    record: BaseModel
    cause: str


PartialWriteListener = Callable[[PartialWrite], None]


class DualWriteCoordinator:
    """
    Writes records to the document store, then the relational store.

    Both store handles are injected and shared across concurrent requests; the
    coordinator holds no per-request state and takes no locks.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        relational_store: RelationalStore,
        timeout: Optional[float] = None,
        on_partial_write: Optional[PartialWriteListener] = None,
    ) -> None:
        self._document = document_store
        self._relational = relational_store
        self._timeout = timeout
        self._on_partial_write = on_partial_write

    def write_user(self, user: User) -> WriteOutcome:
        return self._write(
            "user",
            user,
            lambda: self._document.insert_user(user, timeout=self._timeout),
            lambda: self._relational.insert_user(user, timeout=self._timeout),
        )

    def write_product(self, product: Product) -> WriteOutcome:
        return self._write(
            "product",
            product,
            lambda: self._document.insert_product(product, timeout=self._timeout),
            lambda: self._relational.insert_product(product, timeout=self._timeout),
        )

    def _write(
        self,
        kind: str,
        record: BaseModel,
        write_document: Callable[[], object],
        write_relational: Callable[[], object],
    ) -> WriteOutcome:
        state = WriteState.PENDING

        try:
            write_document()
        except DualStoreError as exc:
            log.error(
                f"[WRITE FAILED] {kind}: document store rejected record",
                extra={"kind": kind, "stage": WriteStage.DOCUMENT.value, "error": str(exc)},
            )
            raise WriteStageError(WriteStage.DOCUMENT, exc, WriteState.FAILED) from exc
        state = WriteState.DOCUMENT_WRITTEN

        try:
            write_relational()
        except DualStoreError as exc:
            self._report_partial_write(kind, record, exc)
            raise WriteStageError(WriteStage.RELATIONAL, exc, WriteState.PARTIALLY_WRITTEN) from exc
        state = WriteState.BOTH_WRITTEN

        log.debug(f"[WRITE OK] {kind}", extra={"kind": kind, "state": state.value})
        return WriteOutcome(kind=kind, state=state)

    def _report_partial_write(self, kind: str, record: BaseModel, exc: Exception) -> None:
        log.warning(
            f"[PARTIAL WRITE] {kind} stored in document store only",
            extra={
                "kind": kind,
                "stage": WriteStage.RELATIONAL.value,
                "state": WriteState.PARTIALLY_WRITTEN.value,
                "error": str(exc),
            },
        )
        if self._on_partial_write is not None:
            self._on_partial_write(PartialWrite(kind=kind, record=record, cause=str(exc)))


__all__ = ["DualWriteCoordinator", "WriteOutcome", "PartialWrite", "PartialWriteListener"]
