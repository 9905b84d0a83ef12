"""
PostgreSQL relational store adapter.

Uses a shared `psycopg_pool.ConnectionPool`; each insert borrows a connection,
runs in its own transaction and is committed when the connection returns to
the pool.
"""

from __future__ import annotations

from typing import Optional, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from dualstore.domain.models import Product, User
from dualstore.errors import DuplicateRecordError, StoreError
from dualstore.stores.abstract import InsertStatus

STORE_NAME = "postgresql"

INSERT_USER_SQL = "INSERT INTO users (name, email, password) VALUES (%s, %s, %s);"
INSERT_USER_SKIP_DUPLICATES_SQL = (
    "INSERT INTO users (name, email, password) VALUES (%s, %s, %s) "
    "ON CONFLICT (email) DO NOTHING;"
)
INSERT_PRODUCT_SQL = "INSERT INTO products (name, price, description) VALUES (%s, %s, %s);"


def apply_statement_timeout(cur: psycopg.Cursor, timeout: Optional[float]) -> None:
    """
    Limit statements in the current transaction to ``timeout`` seconds.

    `set_config(..., true)` scopes the setting to the transaction, so pooled
    connections are returned without a lingering timeout.
    """
    if timeout is None:
        return
    timeout_ms = max(1, int(timeout * 1000))
    cur.execute("SELECT set_config('statement_timeout', %s, true);", (str(timeout_ms),))


class PostgresRelationalStore:
    """
    Relational store over a psycopg connection pool.

    Users are unique by email. `insert_user(..., skip_duplicates=True)` turns a
    conflicting email into a no-op (used by the migrator); otherwise the
    violation raises `DuplicateRecordError`. Products have no dedup key.
    """

    name: str = STORE_NAME

    def __init__(self, pool: ConnectionPool, owns_pool: bool = False) -> None:
        self._pool = pool
        self._owns_pool = owns_pool

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def _execute(self, sql: str, params: Sequence[object], timeout: Optional[float]) -> int:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    apply_statement_timeout(cur, timeout)
                    cur.execute(sql, params)
                    return cur.rowcount
        except pg_errors.UniqueViolation as exc:
            raise DuplicateRecordError(STORE_NAME, str(exc)) from exc
        except psycopg.Error as exc:
            raise StoreError(STORE_NAME, str(exc)) from exc

    def insert_user(
        self,
        user: User,
        timeout: Optional[float] = None,
        skip_duplicates: bool = False,
    ) -> InsertStatus:
        sql = INSERT_USER_SKIP_DUPLICATES_SQL if skip_duplicates else INSERT_USER_SQL
        rowcount = self._execute(sql, (user.name, user.email, user.password), timeout)
        # ON CONFLICT DO NOTHING reports zero affected rows for a duplicate.
        if skip_duplicates and rowcount == 0:
            return InsertStatus.SKIPPED
        return InsertStatus.INSERTED

    def insert_product(self, product: Product, timeout: Optional[float] = None) -> InsertStatus:
        self._execute(
            INSERT_PRODUCT_SQL, (product.name, product.price, product.description), timeout
        )
        return InsertStatus.INSERTED

    def close(self) -> None:
        if self._owns_pool:
            self._pool.close()


__all__ = ["PostgresRelationalStore", "apply_statement_timeout"]
