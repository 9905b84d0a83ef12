from __future__ import annotations

import pytest

from dualstore.errors import StoreConnectionError
from dualstore.infrastructure import db_factory
from dualstore.schema import SchemaInitializer
from dualstore.stores.document import MongoDocumentStore
from dualstore.stores.relational import PostgresRelationalStore


class _FakeMongoClient:
    def __init__(self) -> None:
        self.closed = False

    def __getitem__(self, name: str) -> dict:
        return {}

    def close(self) -> None:
        self.closed = True


class _FakePool:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_open_stores_yields_handles_and_closes_both(monkeypatch, unit_settings) -> None:
    client, pool = _FakeMongoClient(), _FakePool()
    monkeypatch.setattr(db_factory, "connect_mongo", lambda settings: client)
    monkeypatch.setattr(db_factory, "connect_postgres", lambda settings: pool)

    with db_factory.open_stores(unit_settings) as handles:
        assert isinstance(handles.document, MongoDocumentStore)
        assert isinstance(handles.relational, PostgresRelationalStore)
        assert isinstance(handles.schema, SchemaInitializer)
        assert not client.closed and not pool.closed

    assert client.closed
    assert pool.closed


def test_open_stores_closes_mongo_when_postgres_fails(monkeypatch, unit_settings) -> None:
    client = _FakeMongoClient()

    def failing_postgres(settings):
        raise StoreConnectionError("Failed to connect to PostgreSQL: refused")

    monkeypatch.setattr(db_factory, "connect_mongo", lambda settings: client)
    monkeypatch.setattr(db_factory, "connect_postgres", failing_postgres)

    with pytest.raises(StoreConnectionError, match="PostgreSQL"):
        with db_factory.open_stores(unit_settings):
            pass

    assert client.closed


def test_handles_closed_even_when_body_raises(monkeypatch, unit_settings) -> None:
    client, pool = _FakeMongoClient(), _FakePool()
    monkeypatch.setattr(db_factory, "connect_mongo", lambda settings: client)
    monkeypatch.setattr(db_factory, "connect_postgres", lambda settings: pool)

    with pytest.raises(RuntimeError):
        with db_factory.open_stores(unit_settings):
            raise RuntimeError("startup failed")

    assert client.closed
    assert pool.closed
