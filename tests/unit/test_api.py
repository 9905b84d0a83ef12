from __future__ import annotations

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from dualstore.api.app import create_application
from dualstore.coordinator import PartialWrite
from dualstore.errors import StoreConnectionError

USER_BODY = {"name": "A", "email": "a@x.com", "password": "p"}


@pytest.fixture()
def partial_writes() -> list[PartialWrite]:
    return []


@pytest.fixture()
def client(unit_settings, fake_stores_factory, partial_writes):
    app = create_application(
        unit_settings, stores_factory=fake_stores_factory, on_partial_write=partial_writes.append
    )
    with TestClient(app) as test_client:
        yield test_client


def test_post_user_twice_returns_200_then_500(
    client, document_store, relational_store, partial_writes
) -> None:
    first = client.post("/users", json=USER_BODY)
    assert first.status_code == 200
    assert first.json() == {"message": "User created successfully in MongoDB and PostgreSQL!"}
    assert len(document_store.users) == 1
    assert len(relational_store.users) == 1

    second = client.post("/users", json=USER_BODY)
    assert second.status_code == 500
    body = second.json()
    assert body["error"].startswith("Failed to insert into PostgreSQL: ")
    assert body["stage"] == "relational"
    assert body["state"] == "partially_written"
    assert [doc["email"] for doc in document_store.users] == ["a@x.com", "a@x.com"]
    assert len(relational_store.users) == 1
    assert len(partial_writes) == 1


def test_post_product(
    client, document_store, relational_store
) -> None:
    resp = client.post("/products", json={"name": "Widget", "price": 3.25})

    assert resp.status_code == 200
    assert resp.json()["message"] == "Product created successfully in MongoDB and PostgreSQL!"
    assert document_store.products[0]["description"] == ""
    assert relational_store.products[0].description is None


def test_document_store_failure_returns_500_without_prefix(
    client, document_store, relational_store
) -> None:
    document_store.fail_insert = "not primary"

    resp = client.post("/products", json={"name": "Widget", "price": 3.25})

    assert resp.status_code == 500
    assert resp.json() == {"error": "not primary", "stage": "document", "state": "failed"}
    assert relational_store.products == []


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "A", "password": "p"},
        {"name": "A", "email": "", "password": "p"},
        {"name": "A", "email": "a@x.com", "password": 12},
    ],
)
def test_malformed_user_returns_400(client, document_store, payload) -> None:
    resp = client.post("/users", json=payload)

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert document_store.users == []


def test_invalid_json_returns_400(client) -> None:
    resp = client.post(
        "/products", content=b"{not json", headers={"content-type": "application/json"}
    )

    assert resp.status_code == 400


@pytest.mark.parametrize("price", ["cheap", "12.5", True])
def test_product_price_must_be_numeric(client, document_store, relational_store, price) -> None:
    resp = client.post("/products", json={"name": "Widget", "price": price})

    assert resp.status_code == 400
    assert "price" in resp.json()["error"]
    assert document_store.products == []
    assert relational_store.products == []


def test_integer_price_is_accepted(client, relational_store) -> None:
    resp = client.post("/products", json={"name": "Widget", "price": 3})

    assert resp.status_code == 200
    assert relational_store.products[0].price == 3


def test_startup_migrates_before_serving(
    unit_settings, fake_stores_factory, document_store, relational_store, schema_manager
) -> None:
    document_store.add_raw("users", {"name": "Old", "email": "old@x.com", "password": "p"})
    app = create_application(unit_settings, stores_factory=fake_stores_factory)

    with TestClient(app):
        assert schema_manager.calls == 1
        assert [u.email for u in relational_store.users] == ["old@x.com"]
        assert app.state.migration_report.inserted == 1

    assert document_store.closed
    assert relational_store.closed


def test_startup_aborts_when_stores_cannot_connect(unit_settings) -> None:
    @contextmanager
    def failing_factory(settings):
        raise StoreConnectionError("Failed to connect to MongoDB: timed out")
        yield  # pragma: no cover

    app = create_application(unit_settings, stores_factory=failing_factory)

    with pytest.raises(StoreConnectionError):
        with TestClient(app):
            pass
