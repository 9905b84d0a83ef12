"""
MongoDB document store adapter.

Inserts always append; MongoDB enforces no uniqueness on any record field.
`list_users` / `list_products` read the whole collection at call time.
"""

from __future__ import annotations

import contextlib
from typing import Any, ContextManager, Dict, Optional

import pymongo
from pymongo import MongoClient
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from dualstore.domain.models import Product, User
from dualstore.errors import StoreError
from dualstore.stores.abstract import DocumentSequence, RecordT
from dualstore.utils.logging import get_logger

log = get_logger(__name__)

STORE_NAME = "mongodb"
USERS_COLLECTION = "users"
PRODUCTS_COLLECTION = "products"


def _deadline(timeout: Optional[float]) -> ContextManager[Any]:
    if timeout is None:
        return contextlib.nullcontext()
    return pymongo.timeout(timeout)


class MongoDocumentStore:
    """
    Document store backed by a shared, thread-safe `MongoClient`.

    The client is owned by whoever created it (see `open_stores`); `close()`
    only closes it when this adapter was asked to own it.
    """

    name: str = STORE_NAME

    def __init__(self, client: MongoClient, database: str, owns_client: bool = False) -> None:
        self._client = client
        self._db = client[database]
        self._owns_client = owns_client

    @property
    def client(self) -> MongoClient:
        return self._client

    def _insert(self, collection: str, document: Dict[str, Any], timeout: Optional[float]) -> None:
        try:
            with _deadline(timeout):
                self._db[collection].insert_one(document)
        except (PyMongoError, BSONError) as exc:
            raise StoreError(STORE_NAME, str(exc)) from exc

    def insert_user(self, user: User, timeout: Optional[float] = None) -> None:
        self._insert(USERS_COLLECTION, user.to_document(), timeout)

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> None:
        self._insert(PRODUCTS_COLLECTION, product.to_document(), timeout)

    def _list(
        self, collection: str, model: type[RecordT], timeout: Optional[float]
    ) -> DocumentSequence[RecordT]:
        try:
            with _deadline(timeout):
                documents = list(self._db[collection].find({}))
        except (PyMongoError, BSONError) as exc:
            raise StoreError(STORE_NAME, f"cannot read collection '{collection}': {exc}") from exc
        log.debug(
            f"Loaded {len(documents)} documents from {collection}",
            extra={"collection": collection, "documents": len(documents)},
        )
        return DocumentSequence(documents, model)

    def list_users(self, timeout: Optional[float] = None) -> DocumentSequence[User]:
        return self._list(USERS_COLLECTION, User, timeout)

    def list_products(self, timeout: Optional[float] = None) -> DocumentSequence[Product]:
        return self._list(PRODUCTS_COLLECTION, Product, timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["MongoDocumentStore", "USERS_COLLECTION", "PRODUCTS_COLLECTION"]
