"""Utility functions for the catalog kernel."""

from catalog_kernel.utils.hashing import (
    canonicalize_json,
    hash_catalog_event,
    hash_payload,
)

__all__ = [
    "canonicalize_json",
    "hash_catalog_event",
    "hash_payload",
]
