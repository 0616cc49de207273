"""
Pure domain layer.

DTOs, guards, the clock and the host ports.  Nothing here touches the
database; guards only read an Item that a service already loaded.
"""

from catalog_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from catalog_kernel.domain.dtos import (
    AvailableItems,
    CatalogEventRecord,
    ItemInfo,
    PurchaseReceipt,
    PurchaseWorkflow,
)
from catalog_kernel.domain.guards import (
    MAX_AMOUNT,
    GuardContext,
    GuardResult,
    enforce_guards,
    evaluate_guards,
)
from catalog_kernel.domain.host import (
    NULL_IDENTITY,
    CallContext,
    InMemoryValueTransfer,
    Transfer,
    ValueTransfer,
    is_null_identity,
)

__all__ = [
    "AvailableItems",
    "CallContext",
    "CatalogEventRecord",
    "Clock",
    "DeterministicClock",
    "GuardContext",
    "GuardResult",
    "InMemoryValueTransfer",
    "ItemInfo",
    "MAX_AMOUNT",
    "NULL_IDENTITY",
    "PurchaseReceipt",
    "PurchaseWorkflow",
    "SystemClock",
    "Transfer",
    "ValueTransfer",
    "enforce_guards",
    "evaluate_guards",
    "is_null_identity",
]
