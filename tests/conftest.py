"""
Pytest configuration for Dual Store Sync.

Provides fixtures for:
- In-memory fakes of the document store, relational store and schema manager
- Settings overrides for unit and integration tests
- Real PostgreSQL/MongoDB connections for integration tests
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

import pytest

from dualstore.config import Settings
from dualstore.domain.models import Product, User
from dualstore.errors import DuplicateRecordError, StoreError
from dualstore.infrastructure.db_factory import StoreHandles
from dualstore.stores.abstract import DocumentSequence, InsertStatus


class FakeDocumentStore:
    """Append-only in-memory document store with injectable failures."""

    def __init__(self) -> None:
        self.users: List[Dict[str, Any]] = []
        self.products: List[Dict[str, Any]] = []
        self.fail_insert: Optional[str] = None
        self.fail_list: set[str] = set()
        self.timeouts: List[Optional[float]] = []
        self.closed = False
        self._next_id = 0

    def _append(self, collection: List[Dict[str, Any]], doc: Dict[str, Any]) -> None:
        self._next_id += 1
        collection.append({"_id": f"doc-{self._next_id}", **doc})

    def add_raw(self, kind: str, doc: Dict[str, Any]) -> None:
        self._append(getattr(self, kind), doc)

    def insert_user(self, user: User, timeout: Optional[float] = None) -> None:
        self.timeouts.append(timeout)
        if self.fail_insert:
            raise StoreError("mongodb", self.fail_insert)
        self._append(self.users, user.to_document())

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> None:
        self.timeouts.append(timeout)
        if self.fail_insert:
            raise StoreError("mongodb", self.fail_insert)
        self._append(self.products, product.to_document())

    def list_users(self, timeout: Optional[float] = None) -> DocumentSequence[User]:
        if "users" in self.fail_list:
            raise StoreError("mongodb", "cannot read collection 'users'")
        return DocumentSequence(self.users, User)

    def list_products(self, timeout: Optional[float] = None) -> DocumentSequence[Product]:
        if "products" in self.fail_list:
            raise StoreError("mongodb", "cannot read collection 'products'")
        return DocumentSequence(self.products, Product)

    def close(self) -> None:
        self.closed = True


class FakeRelationalStore:
    """In-memory relational store enforcing unique user emails."""

    def __init__(self) -> None:
        self.users: List[User] = []
        self.products: List[Product] = []
        self.fail_insert: Optional[str] = None
        self.fail_emails: set[str] = set()
        self.timeouts: List[Optional[float]] = []
        self.closed = False

    def insert_user(
        self, user: User, timeout: Optional[float] = None, skip_duplicates: bool = False
    ) -> InsertStatus:
        self.timeouts.append(timeout)
        if self.fail_insert or user.email in self.fail_emails:
            raise StoreError("postgresql", self.fail_insert or "connection reset")
        if any(existing.email == user.email for existing in self.users):
            if skip_duplicates:
                return InsertStatus.SKIPPED
            raise DuplicateRecordError(
                "postgresql",
                'duplicate key value violates unique constraint "users_email_key"',
            )
        self.users.append(user)
        return InsertStatus.INSERTED

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> InsertStatus:
        self.timeouts.append(timeout)
        if self.fail_insert:
            raise StoreError("postgresql", self.fail_insert)
        self.products.append(product)
        return InsertStatus.INSERTED

    def close(self) -> None:
        self.closed = True


class FakeSchema:
    def __init__(self) -> None:
        self.calls = 0
        self.error: Optional[Exception] = None

    def ensure_schema(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


@pytest.fixture()
def document_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def relational_store() -> FakeRelationalStore:
    return FakeRelationalStore()


@pytest.fixture()
def schema_manager() -> FakeSchema:
    return FakeSchema()


@pytest.fixture()
def store_handles(
    document_store: FakeDocumentStore,
    relational_store: FakeRelationalStore,
    schema_manager: FakeSchema,
) -> StoreHandles:
    return StoreHandles(document=document_store, relational=relational_store, schema=schema_manager)


@pytest.fixture()
def fake_stores_factory(store_handles: StoreHandles):
    """Stand-in for `open_stores` that yields the in-memory handles."""

    @contextmanager
    def factory(settings: Settings) -> Generator[StoreHandles, None, None]:
        try:
            yield store_handles
        finally:
            store_handles.close()

    return factory


@pytest.fixture()
def unit_settings() -> Settings:
    return Settings(
        mongo_uri="mongodb://unused:27017",
        pg_host="unused",
        migrate_on_startup=True,
        migration_strict=True,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture for integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        pg_host=os.getenv("PG_HOST", "localhost"),
        pg_port=int(os.getenv("PG_PORT", "5432")),
        pg_user=os.getenv("PG_USER", "postgres"),
        pg_password=os.getenv("PG_PASSWORD", "postgres"),
        pg_name=os.getenv("PG_NAME", "migration_test"),
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_database=os.getenv("MONGO_DATABASE", "migrationgo_test"),
        connect_attempts=1,
        log_level="DEBUG",
    )
