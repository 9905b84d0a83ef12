"""
Store adapters for Dual Store Sync.

`MongoDocumentStore` and `PostgresRelationalStore` implement the
`DocumentStore` / `RelationalStore` protocols from `dualstore.stores.abstract`.
"""

from dualstore.stores.abstract import (
    DecodedDocument,
    DocumentSequence,
    DocumentStore,
    InsertStatus,
    RelationalStore,
    SchemaManager,
)
from dualstore.stores.document import MongoDocumentStore
from dualstore.stores.relational import PostgresRelationalStore

__all__ = [
    "DecodedDocument",
    "DocumentSequence",
    "DocumentStore",
    "InsertStatus",
    "MongoDocumentStore",
    "PostgresRelationalStore",
    "RelationalStore",
    "SchemaManager",
]
