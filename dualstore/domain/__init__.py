"""
Domain package for Dual Store Sync.

Exports the record models written to both stores. Keep this package focused
on data definitions and validation concerns.
"""

from dualstore.domain.models import Product, User

__all__ = [
    "User",
    "Product",
]
