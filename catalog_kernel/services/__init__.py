"""Services for the catalog kernel (write side)."""

from catalog_kernel.services.access_control import AccessControlService
from catalog_kernel.services.admin_ops import AdministrativeOps
from catalog_kernel.services.event_log import EventLogService
from catalog_kernel.services.item_registry import ItemRegistry
from catalog_kernel.services.purchase_engine import PurchaseEngine
from catalog_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = [
    "AccessControlService",
    "AdministrativeOps",
    "EventLogService",
    "ItemRegistry",
    "PurchaseEngine",
    "SequenceCounter",
    "SequenceService",
]
