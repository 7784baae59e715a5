"""
Mongo Bootstrap

MongoDB connection lifecycle and idempotent startup reconciliation of
collections, indexes and reference data
"""

__version__ = "0.1.0"

from .config import config
from .lib.database import ConnectionManager
from .lib.initializer import initialize, initialize_sync

__all__ = ["ConnectionManager", "config", "initialize", "initialize_sync"]
