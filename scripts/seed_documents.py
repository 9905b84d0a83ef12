"""
Seed script for Dual Store Sync.

Generates deterministic pseudo-random user and product documents and loads
them into the MongoDB collections that the startup migration reads from.
Optional fractions of duplicate emails and malformed documents let a demo run
show how the migrator skips and reports them.
"""

from __future__ import annotations

import random
import sys
import time
from typing import Any, Dict, Iterator, List

import typer
from pymongo import MongoClient

from dualstore.config import get_settings
from dualstore.stores.document import PRODUCTS_COLLECTION, USERS_COLLECTION

app = typer.Typer(help="Generate synthetic documents and load them into MongoDB.")

FIRST_NAMES = ["ada", "grace", "alan", "edsger", "barbara", "ken", "margaret", "linus"]
PRODUCT_WORDS = ["widget", "gadget", "gizmo", "sprocket", "doohickey", "contraption"]


def _generate_users(
    count: int, seed: int, duplicate_ratio: float = 0.0, malformed_ratio: float = 0.0
) -> List[Dict[str, Any]]:
    rng = random.Random(seed)
    users: List[Dict[str, Any]] = []
    emails: List[str] = []
    for i in range(count):
        name = rng.choice(FIRST_NAMES)
        if emails and rng.random() < duplicate_ratio:
            email = rng.choice(emails)
        else:
            email = f"{name}.{i}@example.com"
        doc: Dict[str, Any] = {
            "name": name.title(),
            "email": email,
            "password": f"pw-{rng.randint(1000, 9999)}",
        }
        if rng.random() < malformed_ratio:
            del doc["email"]
        else:
            emails.append(email)
        users.append(doc)
    return users


def _generate_products(count: int, seed: int, malformed_ratio: float = 0.0) -> List[Dict[str, Any]]:
    rng = random.Random(seed + 1)
    products: List[Dict[str, Any]] = []
    for _ in range(count):
        word = rng.choice(PRODUCT_WORDS)
        doc: Dict[str, Any] = {
            "name": f"{word.title()} {rng.randint(1, 999)}",
            "price": round(rng.uniform(1, 500), 2),
            "description": rng.choice(["", f"A fine {word}.", f"Refurbished {word}."]),
        }
        if rng.random() < malformed_ratio:
            doc["price"] = "not-a-number"
        products.append(doc)
    return products


def _batched(items: List[Dict[str, Any]], batch_size: int) -> Iterator[List[Dict[str, Any]]]:
    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


def _load(
    client: MongoClient,
    database: str,
    collection: str,
    docs: List[Dict[str, Any]],
    batch_size: int,
) -> int:
    inserted = 0
    for batch in _batched(docs, batch_size):
        inserted += len(client[database][collection].insert_many(batch).inserted_ids)
    return inserted


@app.command()
def main(
    users: int = typer.Option(100, "--users", "-u", help="Number of user documents."),
    products: int = typer.Option(50, "--products", "-p", help="Number of product documents."),
    batch_size: int = typer.Option(1_000, "--batch-size", "-b", help="insert_many batch size."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    duplicate_ratio: float = typer.Option(
        0.0, "--duplicate-ratio", help="Fraction of users reusing an earlier email."
    ),
    malformed_ratio: float = typer.Option(
        0.0, "--malformed-ratio", help="Fraction of documents that fail to decode."
    ),
    uri: str | None = typer.Option(None, "--uri", help="Optional MongoDB URI override."),
) -> None:
    """
    Generate synthetic documents and insert them into MongoDB.
    """
    settings = get_settings()
    start = time.perf_counter()
    user_docs = _generate_users(users, seed, duplicate_ratio, malformed_ratio)
    product_docs = _generate_products(products, seed, malformed_ratio)

    client: MongoClient = MongoClient(uri or settings.mongo_uri)
    try:
        typer.echo(
            f"Loading {users:,} users and {products:,} products into {settings.mongo_database}"
        )
        loaded_users = _load(
            client, settings.mongo_database, USERS_COLLECTION, user_docs, batch_size
        )
        loaded_products = _load(
            client, settings.mongo_database, PRODUCTS_COLLECTION, product_docs, batch_size
        )
    finally:
        client.close()

    duration = time.perf_counter() - start
    typer.echo(
        f"Inserted {loaded_users:,} users and {loaded_products:,} products in {duration:.2f}s."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
