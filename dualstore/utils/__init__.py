"""
Utilities package for Dual Store Sync.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from dualstore.utils.logging import configure_logging, get_logger
from dualstore.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
