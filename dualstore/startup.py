"""
Startup sequence: relational schema, then bulk migration.

Both steps run before the API accepts traffic. A schema failure always aborts
startup; a migration whose source collection could not be read aborts it too
when ``strict`` is set. Per-record migration failures never abort.
"""

from __future__ import annotations

from typing import Optional

from dualstore.config import Settings, get_settings
from dualstore.errors import MigrationError
from dualstore.infrastructure.db_factory import StoreHandles
from dualstore.migrator import BulkMigrator, MigrationReport
from dualstore.utils.logging import get_logger

log = get_logger(__name__)


def bootstrap(
    handles: StoreHandles, settings: Optional[Settings] = None
) -> Optional[MigrationReport]:
    """
    Ensure the schema and, unless disabled, migrate existing documents.

    Returns the migration report, or None when migration is disabled.

    Raises
    ------
    SchemaError
        If the relational tables cannot be created.
    MigrationError
        If a source collection could not be read and migration is strict.
    """
    settings = settings or get_settings()

    handles.schema.ensure_schema()

    if not settings.migrate_on_startup:
        log.info("[MIGRATION DISABLED] skipping startup migration")
        return None

    report = BulkMigrator(
        handles.document, handles.relational, timeout=settings.store_timeout_seconds
    ).migrate_all()

    if report.has_source_failures:
        message = "Failed to migrate data from MongoDB to PostgreSQL: " + "; ".join(
            report.source_errors
        )
        if settings.migration_strict:
            raise MigrationError(message)
        log.warning(message, extra={"source_errors": report.source_errors})
    return report


__all__ = ["bootstrap"]
