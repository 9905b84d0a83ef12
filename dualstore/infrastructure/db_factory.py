"""
Store connection factory for Dual Store Sync.

Opens the two process-wide store handles (a `MongoClient` and a psycopg
`ConnectionPool`) and releases them on exit. Handles are passed explicitly to
the schema initializer, the migrator and the coordinator; there are no module
level singletons.

Connecting retries transient failures with tenacity. This is the only retry in
the package: once the stores are open, individual calls are never retried.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from dualstore.config import Settings, get_settings
from dualstore.errors import StoreConnectionError
from dualstore.schema import SchemaInitializer
from dualstore.stores.abstract import DocumentStore, RelationalStore, SchemaManager
from dualstore.stores.document import MongoDocumentStore
from dualstore.stores.relational import PostgresRelationalStore
from dualstore.utils.logging import get_logger

log = get_logger(__name__)

CONNECT_TIMEOUT_SECONDS = 10.0


@dataclass
class StoreHandles:
    """The shared store handles owned by the process lifecycle."""

    document: DocumentStore
    relational: RelationalStore
    schema: SchemaManager

    def close(self) -> None:
        try:
            self.document.close()
        finally:
            self.relational.close()


def _retrying(attempts: int, *exc_types: type) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(exc_types),
        reraise=True,
    )


def connect_mongo(settings: Settings) -> MongoClient:
    """
    Create a MongoClient and verify the server answers a ping.

    Raises
    ------
    StoreConnectionError
        If the server cannot be reached after all retry attempts.
    """
    client: MongoClient = MongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=int(CONNECT_TIMEOUT_SECONDS * 1000),
    )
    try:
        for attempt in _retrying(settings.connect_attempts, PyMongoError):
            with attempt:
                client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise StoreConnectionError(f"Failed to connect to MongoDB: {exc}") from exc
    log.info("Connected to MongoDB", extra={"database": settings.mongo_database})
    return client


def connect_postgres(settings: Settings) -> ConnectionPool:
    """
    Create and open the PostgreSQL connection pool.

    Raises
    ------
    StoreConnectionError
        If no connection can be established after all retry attempts.
    """
    pool = ConnectionPool(
        conninfo=settings.pg_dsn,
        min_size=settings.pg_pool_min_size,
        max_size=settings.pg_pool_max_size,
        open=False,
    )
    try:
        pool.open(wait=False)
        for attempt in _retrying(
            settings.connect_attempts, psycopg.OperationalError, PoolTimeout
        ):
            with attempt:
                pool.wait(timeout=CONNECT_TIMEOUT_SECONDS)
    except (psycopg.Error, PoolTimeout) as exc:
        pool.close()
        raise StoreConnectionError(f"Failed to connect to PostgreSQL: {exc}") from exc
    log.info(
        "Connected to PostgreSQL",
        extra={"host": settings.pg_host, "port": settings.pg_port, "db": settings.pg_name},
    )
    return pool


@contextmanager
def open_stores(settings: Optional[Settings] = None) -> Generator[StoreHandles, None, None]:
    """
    Open both stores for the lifetime of the ``with`` block.

    Example
    -------
        with open_stores() as handles:
            handles.schema.ensure_schema()
    """
    settings = settings or get_settings()
    client = connect_mongo(settings)
    try:
        pool = connect_postgres(settings)
    except StoreConnectionError:
        client.close()
        raise

    handles = StoreHandles(
        document=MongoDocumentStore(client, settings.mongo_database, owns_client=True),
        relational=PostgresRelationalStore(pool, owns_pool=True),
        schema=SchemaInitializer(pool),
    )
    try:
        yield handles
    finally:
        handles.close()
        log.info("Store connections closed")


__all__ = [
    "StoreHandles",
    "connect_mongo",
    "connect_postgres",
    "open_stores",
]
