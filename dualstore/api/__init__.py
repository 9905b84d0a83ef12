"""
HTTP layer for Dual Store Sync (FastAPI).
"""

from dualstore.api.app import create_application

__all__ = ["create_application"]
