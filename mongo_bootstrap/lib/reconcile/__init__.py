"""Idempotent reconciliation of collections, indexes and reference data"""

from .binding import DocumentBinding, bind
from .collections import ensure_collection
from .indexes import ensure_index, ensure_text_index
from .languages import initialize_categories
from .ttl import check_and_update_ttl, create_ttl_index

__all__ = [
    "DocumentBinding",
    "bind",
    "check_and_update_ttl",
    "create_ttl_index",
    "ensure_collection",
    "ensure_index",
    "ensure_text_index",
    "initialize_categories",
]
