"""
Catalog Kernel

A transactional, owner-administered item catalog with:
- Two purchase workflows (legacy buy and refunding purchase)
- All-or-nothing operations guarded by ordered precondition checks
- An append-only, hash-chained event log pushed to subscribers on commit
"""

from catalog_kernel.catalog import CatalogService
from catalog_kernel.domain.host import NULL_IDENTITY, CallContext

__version__ = "0.1.0"

__all__ = [
    "CallContext",
    "CatalogService",
    "NULL_IDENTITY",
]
