"""
Bulk migration of existing documents into the relational store.

Runs once at startup, before the API accepts requests. Each record kind is
copied independently: a kind whose source collection cannot be read is
reported and the other kind is still migrated. Per-record decode or insert
failures are logged, collected in the report and skipped.

Usage:
    from dualstore.migrator import BulkMigrator

    report = BulkMigrator(document_store, relational_store).migrate_all()
    print(report.to_dict())

Reports can be saved to `results/` with `persist_report`:
- `results/latest-migration.json` (last run)
- `results/migration-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel

from dualstore.errors import DualStoreError, MigrationRecordError
from dualstore.stores.abstract import (
    DocumentSequence,
    DocumentStore,
    InsertStatus,
    RelationalStore,
)
from dualstore.utils.logging import get_logger
from dualstore.utils.profiler import profile_block

log = get_logger(__name__)


@dataclass
class KindReport:
    """Counts for one record kind. `attempted == inserted + skipped + failed`."""

    kind: str
    attempted: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    source_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "attempted": self.attempted,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "failed": self.failed,
            "source_error": self.source_error,
        }


@dataclass
class MigrationReport:
    users: KindReport = field(default_factory=lambda: KindReport("users"))
    products: KindReport = field(default_factory=lambda: KindReport("products"))
    errors: List[MigrationRecordError] = field(default_factory=list)
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None

    @property
    def kinds(self) -> Tuple[KindReport, KindReport]:
        return (self.users, self.products)

    @property
    def attempted(self) -> int:
        return sum(k.attempted for k in self.kinds)

    @property
    def inserted(self) -> int:
        return sum(k.inserted for k in self.kinds)

    @property
    def skipped(self) -> int:
        return sum(k.skipped for k in self.kinds)

    @property
    def failed(self) -> int:
        return sum(k.failed for k in self.kinds)

    @property
    def source_errors(self) -> List[str]:
        return [f"{k.kind}: {k.source_error}" for k in self.kinds if k.source_error]

    @property
    def has_source_failures(self) -> bool:
        return any(k.source_error for k in self.kinds)

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 3),
            "peak_rss_bytes": self.peak_rss_bytes,
            "kinds": [k.to_dict() for k in self.kinds],
            "errors": [e.to_dict() for e in self.errors],
        }


class BulkMigrator:
    """
    Copy every user and product document into the relational store.

    Users are inserted with duplicate skipping, so re-running is safe for them.
    Products have no dedup key and every run inserts them again.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        relational_store: RelationalStore,
        timeout: Optional[float] = None,
    ) -> None:
        self._document = document_store
        self._relational = relational_store
        self._timeout = timeout

    def migrate_all(self) -> MigrationReport:
        report = MigrationReport()
        log.info("[MIGRATION START] documents -> relational store")
        with profile_block("migration") as stats:
            self._migrate_kind(
                report.users,
                report.errors,
                lambda: self._document.list_users(timeout=self._timeout),
                lambda user: self._relational.insert_user(
                    user, timeout=self._timeout, skip_duplicates=True
                ),
            )
            self._migrate_kind(
                report.products,
                report.errors,
                lambda: self._document.list_products(timeout=self._timeout),
                lambda product: self._relational.insert_product(product, timeout=self._timeout),
            )
        report.duration_seconds = stats.duration_seconds
        report.peak_rss_bytes = stats.peak_rss_bytes

        log.info(
            "[MIGRATION COMPLETE] "
            f"attempted={report.attempted} inserted={report.inserted} "
            f"skipped={report.skipped} failed={report.failed}",
            extra={
                "attempted": report.attempted,
                "inserted": report.inserted,
                "skipped": report.skipped,
                "failed": report.failed,
                "duration": round(report.duration_seconds, 3),
            },
        )
        return report

    def _migrate_kind(
        self,
        counts: KindReport,
        errors: List[MigrationRecordError],
        open_source: Callable[[], DocumentSequence],
        insert: Callable[[BaseModel], InsertStatus],
    ) -> None:
        kind = counts.kind
        try:
            source = open_source()
        except DualStoreError as exc:
            counts.source_error = str(exc)
            log.error(f"[MIGRATION SOURCE FAILED] {kind}", extra={"kind": kind, "error": str(exc)})
            return

        for item in source:
            counts.attempted += 1
            if item.record is None:
                self._record_failure(counts, errors, item.source_id, f"decode: {item.error}")
                continue
            try:
                status = insert(item.record)
            except DualStoreError as exc:
                self._record_failure(counts, errors, item.source_id, f"insert: {exc}")
                continue
            if status is InsertStatus.SKIPPED:
                counts.skipped += 1
            else:
                counts.inserted += 1

        log.info(
            f"[MIGRATION KIND] {kind}",
            extra=counts.to_dict(),
        )

    @staticmethod
    def _record_failure(
        counts: KindReport,
        errors: List[MigrationRecordError],
        source_id: Optional[str],
        message: str,
    ) -> None:
        counts.failed += 1
        errors.append(MigrationRecordError(kind=counts.kind, source_id=source_id, message=message))
        log.warning(
            f"[MIGRATION RECORD SKIPPED] {counts.kind} {source_id}: {message}",
            extra={"kind": counts.kind, "source_id": source_id},
        )


def persist_report(report: MigrationReport, results_dir: Path | str = "results") -> Path:
    """Write the report to `latest-migration.json` plus a timestamped archive."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest-migration.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"migration-{timestamp}.json"

    payload = {"timestamp": datetime.now(timezone.utc).isoformat(), **report.to_dict()}
    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info(
        "Migration report persisted",
        extra={"latest": str(latest_path), "archive": str(archive_path)},
    )
    return latest_path


__all__ = ["BulkMigrator", "KindReport", "MigrationReport", "persist_report"]
