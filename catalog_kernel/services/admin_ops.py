"""
AdministrativeOps -- owner-only catalog mutations.

Responsibility:
    add / lock / unlock / restock / change status / update price /
    emergency stop.  Each operation authorizes the caller, checks the item
    exists (all but emergency_stop), mutates, and appends its event.

Architecture position:
    Kernel > Services.  Runs inside the transaction opened by
    CatalogService.

Invariants enforced:
    - lock_item / unlock_item write ``locked`` only.
    - change_item_status is the only operation writing both ``is_available``
      and ``locked`` (locked = not is_active).
    - restock_item raises ``quantity`` only; ``stock`` is never replenished.
    - Prices and the restocked quantity stay within MAX_AMOUNT.
    - update_item_price accepts zero.
    - emergency_stop clears ``is_available`` on every listed item and
      touches nothing else.
"""

from catalog_kernel.domain.guards import (
    ADMIN_ITEM_GUARDS,
    MAX_AMOUNT,
    GuardContext,
    check_amount_bound,
    enforce_guards,
)
from catalog_kernel.exceptions import InvalidInputError
from catalog_kernel.logging_config import get_logger
from catalog_kernel.models.item import Item
from catalog_kernel.services.access_control import AccessControlService
from catalog_kernel.services.base import BaseService
from catalog_kernel.services.event_log import EventLogService
from catalog_kernel.services.item_registry import ItemRegistry

logger = get_logger("services.admin_ops")


class AdministrativeOps(BaseService):
    """Owner-gated mutations built on ItemRegistry."""

    def __init__(
        self,
        session,
        access: AccessControlService,
        registry: ItemRegistry,
        event_log: EventLogService,
    ):
        super().__init__(session)
        self._access = access
        self._registry = registry
        self._event_log = event_log

    def _authorized_item(self, caller: str, item_id: int, operation: str) -> Item:
        item = self._registry.find(item_id, for_update=True)
        enforce_guards(
            ADMIN_ITEM_GUARDS,
            GuardContext(
                operation=operation,
                caller=caller,
                owner=self._access.owner(),
                item_id=item_id,
                item=item,
            ),
        )
        return item

    def add_item(self, caller: str, name: str, price: int, quantity: int) -> Item:
        self._access.authorize(caller, "add_item")
        item = self._registry.create(name, price, quantity, created_by=caller)
        self._event_log.record_item_added(
            caller, item.id, item.name, item.unit_price, item.quantity, item.stock
        )
        return item

    def lock_item(self, caller: str, item_id: int) -> Item:
        item = self._authorized_item(caller, item_id, "lock_item")
        item.locked = True
        self.session.flush()
        self._event_log.record_item_locked(caller, item.id)
        logger.info("item_locked", extra={"target_item_id": item.id})
        return item

    def unlock_item(self, caller: str, item_id: int) -> Item:
        item = self._authorized_item(caller, item_id, "unlock_item")
        item.locked = False
        self.session.flush()
        self._event_log.record_item_unlocked(caller, item.id)
        logger.info("item_unlocked", extra={"target_item_id": item.id})
        return item

    def restock_item(self, caller: str, item_id: int, added: int) -> Item:
        item = self._authorized_item(caller, item_id, "restock_item")
        if added < 0:
            raise InvalidInputError("added", added, "must not be negative")
        if item.quantity + added > MAX_AMOUNT:
            raise InvalidInputError(
                "added", added, f"would raise quantity above {MAX_AMOUNT}"
            )
        item.quantity += added
        self.session.flush()
        self._event_log.record_item_restocked(caller, item.id, item.quantity)
        logger.info(
            "item_restocked",
            extra={"target_item_id": item.id, "added": added, "new_quantity": item.quantity},
        )
        return item

    def change_item_status(self, caller: str, item_id: int, is_active: bool) -> Item:
        item = self._authorized_item(caller, item_id, "change_item_status")
        item.is_available = is_active
        item.locked = not is_active
        self.session.flush()
        self._event_log.record_status_changed(caller, item.id, is_active)
        logger.info(
            "item_status_changed",
            extra={"target_item_id": item.id, "is_active": is_active},
        )
        return item

    def update_item_price(self, caller: str, item_id: int, new_price: int) -> Item:
        item = self._authorized_item(caller, item_id, "update_item_price")
        # Zero is a valid price
        if new_price < 0:
            raise InvalidInputError("new_price", new_price, "must not be negative")
        check_amount_bound("new_price", new_price)
        previous = item.unit_price
        item.unit_price = new_price
        self.session.flush()
        self._event_log.record_price_updated(caller, item.id, new_price)
        logger.info(
            "item_price_updated",
            extra={"target_item_id": item.id, "previous_price": previous, "new_price": new_price},
        )
        return item

    def emergency_stop(self, caller: str) -> int:
        """
        Mark every listed item unavailable.

        Returns:
            Number of items in the listing.
        """
        self._access.authorize(caller, "emergency_stop")
        items = self._registry.list_items(for_update=True)
        for item in items:
            item.is_available = False
        self.session.flush()
        self._event_log.record_emergency_stop(caller, len(items))
        logger.warning("emergency_stop", extra={"item_count": len(items)})
        return len(items)
