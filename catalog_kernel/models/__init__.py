"""Domain models for the catalog kernel."""

from catalog_kernel.models.catalog_event import CatalogEvent, CatalogEventType
from catalog_kernel.models.item import Item, ItemListing
from catalog_kernel.models.ownership import OWNERSHIP_ROW_ID, CatalogOwnership
from catalog_kernel.models.purchase_ledger import PurchaseLedgerEntry

__all__ = [
    "CatalogEvent",
    "CatalogEventType",
    "CatalogOwnership",
    "Item",
    "ItemListing",
    "OWNERSHIP_ROW_ID",
    "PurchaseLedgerEntry",
]
