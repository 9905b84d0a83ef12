"""
Domain models for Dual Store Sync.

Both record kinds share one logical schema across the MongoDB collections and
the PostgreSQL tables created by `dualstore.schema`. The same models validate
API request bodies and decode documents read back for migration.

WARNING: `User.password` is stored and transmitted in plaintext in both
stores. This reproduces the behaviour of the system being replaced and is not
a safe way to handle credentials.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, StrictFloat, field_validator


class User(BaseModel):
    """
    Representation of a row in `users` / a document in the `users` collection.
    """

    name: str = Field(..., min_length=1, description="Display name.")
    email: str = Field(..., min_length=1, description="Unique in the relational store only.")
    password: str = Field(..., min_length=1, description="Plaintext password (unsafe).")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()


class Product(BaseModel):
    """
    Representation of a row in `products` / a document in the `products` collection.
    """

    name: str = Field(..., min_length=1, description="Product name.")
    # Strict: booleans and numeric strings are rejected, ints are accepted.
    price: StrictFloat = Field(..., description="Unit price.")
    description: Optional[str] = Field(None, description="Free-form description.")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    @field_validator("price")
    @classmethod
    def _finite_price(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("price must be a finite number")
        return value

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump()
        # Documents always carry the field; a missing description is stored as "".
        if doc["description"] is None:
            doc["description"] = ""
        return doc


__all__ = ["User", "Product"]
