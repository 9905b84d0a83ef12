"""
Relational schema initialization.

Creates the `users` and `products` tables when they are missing. Runs on every
process start; existing tables are never dropped or altered.
"""

from __future__ import annotations

from typing import Tuple

import psycopg
from psycopg_pool import ConnectionPool

from dualstore.errors import SchemaError
from dualstore.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        price DOUBLE PRECISION NOT NULL,
        description TEXT
    );
    """,
)


class SchemaInitializer:
    """Idempotent `CREATE TABLE IF NOT EXISTS` for the relational store."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def ensure_schema(self) -> None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    for statement in SCHEMA_STATEMENTS:
                        cur.execute(statement)
        except psycopg.Error as exc:
            raise SchemaError(f"Failed to create relational schema: {exc}") from exc
        log.info("[SCHEMA READY] users, products", extra={"tables": ["users", "products"]})


__all__ = ["SchemaInitializer", "SCHEMA_STATEMENTS"]
