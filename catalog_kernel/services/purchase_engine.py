"""
PurchaseEngine -- the two purchase workflows.

Responsibility:
    Applies ``buy`` (legacy) and ``purchase`` against one item.  The two
    workflows are intentionally separate and deplete different counters:

    ============  ==========  ======  ============  ======  =======
    workflow      counter     locked  zero qty      refund  ledger
    ============  ==========  ======  ============  ======  =======
    buy           stock       ignored accepted      never   no
    purchase      quantity    rejects rejects       excess  no
    ============  ==========  ======  ============  ======  =======

Architecture position:
    Kernel > Services.  Loads the item with a row lock, enforces the
    workflow's guard chain, mutates, then appends the ItemPurchased event.
    The refund itself is NOT sent here: the engine reports it on the
    receipt and CatalogService transfers it after commit.

Invariants enforced:
    - Every guard passes before any counter is written.
    - stock / quantity never go negative.
    - Neither workflow writes the purchase ledger.
"""

from catalog_kernel.domain.dtos import PurchaseReceipt, PurchaseWorkflow
from catalog_kernel.domain.guards import (
    BUY_GUARDS,
    PURCHASE_GUARDS,
    GuardContext,
    enforce_guards,
)
from catalog_kernel.logging_config import get_logger
from catalog_kernel.services.base import BaseService
from catalog_kernel.services.event_log import EventLogService
from catalog_kernel.services.item_registry import ItemRegistry

logger = get_logger("services.purchase_engine")


class PurchaseEngine(BaseService):
    """Runs buy() and purchase() inside the caller's transaction."""

    def __init__(self, session, registry: ItemRegistry, event_log: EventLogService):
        super().__init__(session)
        self._registry = registry
        self._event_log = event_log

    def buy(
        self, item_id: int, requested_qty: int, paid_amount: int, caller: str
    ) -> PurchaseReceipt:
        """
        Legacy buy: deplete ``stock``.

        Overpayment is kept, the lock flag is not consulted, and a zero
        quantity succeeds (and is still recorded).

        Raises:
            ItemNotFoundError, ItemUnavailableError, InvalidInputError,
            InsufficientStockError, InsufficientPaymentError
        """
        item = self._registry.find(item_id, for_update=True)
        enforce_guards(
            BUY_GUARDS,
            GuardContext(
                operation="buy",
                caller=caller,
                item_id=item_id,
                item=item,
                quantity=requested_qty,
                paid_amount=paid_amount,
            ),
        )

        item.stock -= requested_qty
        self.session.flush()

        receipt = PurchaseReceipt(
            workflow=PurchaseWorkflow.BUY,
            item_id=item.id,
            buyer=caller,
            quantity=requested_qty,
            unit_price=item.unit_price,
            total_cost=item.unit_price * requested_qty,
            paid_amount=paid_amount,
            refund=0,
            remaining=item.stock,
        )
        self._event_log.record_item_purchased(receipt)

        logger.info(
            "buy_completed",
            extra={
                "purchased_item_id": item.id,
                "quantity": requested_qty,
                "remaining_stock": item.stock,
                "paid_amount": paid_amount,
            },
        )
        return receipt

    def purchase(
        self, item_id: int, amount: int, paid_amount: int, caller: str
    ) -> PurchaseReceipt:
        """
        Purchase: deplete ``quantity`` and owe back any overpayment.

        Raises:
            ItemNotFoundError, ItemUnavailableError, InvalidInputError,
            ItemLockedError, InsufficientStockError, InsufficientPaymentError
        """
        item = self._registry.find(item_id, for_update=True)
        enforce_guards(
            PURCHASE_GUARDS,
            GuardContext(
                operation="purchase",
                caller=caller,
                item_id=item_id,
                item=item,
                quantity=amount,
                paid_amount=paid_amount,
            ),
        )

        total_cost = item.unit_price * amount
        item.quantity -= amount
        self.session.flush()

        receipt = PurchaseReceipt(
            workflow=PurchaseWorkflow.PURCHASE,
            item_id=item.id,
            buyer=caller,
            quantity=amount,
            unit_price=item.unit_price,
            total_cost=total_cost,
            paid_amount=paid_amount,
            refund=paid_amount - total_cost,
            remaining=item.quantity,
        )
        self._event_log.record_item_purchased(receipt)

        logger.info(
            "purchase_completed",
            extra={
                "purchased_item_id": item.id,
                "amount": amount,
                "remaining_quantity": item.quantity,
                "total_cost": total_cost,
                "refund": receipt.refund,
            },
        )
        return receipt
