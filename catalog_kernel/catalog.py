"""
CatalogService -- the single service object that owns all catalog state.

Responsibility:
    Exposes every public catalog operation.  Each mutating call:

        1. takes the catalog lock (one writer at a time),
        2. opens one transaction (session_scope),
        3. runs the operation's guard chain, then mutates, then appends the
           event rows -- all in that transaction,
        4. commits, or rolls back everything on the first failure,
        5. pushes the committed events to subscribers, in seq order,
        6. (purchase only) sends the refund through the ValueTransfer port.

    Queries run in their own session and only ever see committed state.

Architecture position:
    Kernel facade.  Callers outside the kernel use this class only; the
    services/ and selectors/ modules are its building blocks.

Invariants enforced:
    - All-or-nothing: a rejected call leaves items, counters, owner and the
      event log exactly as they were, and pushes nothing.
    - Refunds and subscriber pushes happen strictly after commit.  A failed
      refund never undoes or re-applies the purchase (RefundTransferError).

Failure modes:
    - Any CatalogKernelError subclass from the guards (logged at WARNING as
      ``operation_rejected``).
    - RefundTransferError after a committed purchase whose refund failed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from catalog_kernel.db.engine import build_engine, create_tables, session_scope
from catalog_kernel.db.immutability import register_immutability_listeners
from catalog_kernel.domain.clock import Clock, SystemClock
from catalog_kernel.domain.dtos import (
    AvailableItems,
    CatalogEventRecord,
    ItemInfo,
    PurchaseReceipt,
)
from catalog_kernel.domain.host import CallContext, InMemoryValueTransfer, ValueTransfer
from catalog_kernel.exceptions import CatalogKernelError, RefundTransferError
from catalog_kernel.logging_config import LogContext, configure_logging, get_logger
from catalog_kernel.models.catalog_event import CatalogEventType
from catalog_kernel.selectors.catalog_selector import CatalogSelector
from catalog_kernel.services.access_control import AccessControlService
from catalog_kernel.services.admin_ops import AdministrativeOps
from catalog_kernel.services.event_log import EventLogService
from catalog_kernel.services.item_registry import ItemRegistry
from catalog_kernel.services.purchase_engine import PurchaseEngine
from catalog_kernel.services.sequence_service import SequenceService

logger = get_logger("catalog")

T = TypeVar("T")

EventSubscriber = Callable[[CatalogEventRecord], None]


@dataclass
class _UnitOfWork:
    """The services wired to one transaction."""

    session: Session
    event_log: EventLogService
    registry: ItemRegistry
    access: AccessControlService
    admin: AdministrativeOps
    engine: PurchaseEngine

    @classmethod
    def open(cls, session: Session, clock: Clock) -> _UnitOfWork:
        event_log = EventLogService(session, clock)
        registry = ItemRegistry(session)
        access = AccessControlService(session, event_log)
        return cls(
            session=session,
            event_log=event_log,
            registry=registry,
            access=access,
            admin=AdministrativeOps(session, access, registry, event_log),
            engine=PurchaseEngine(session, registry, event_log),
        )


class CatalogService:
    """
    Catalog facade: administrative commands, purchases, queries, events.

    Usage::

        catalog = CatalogService.from_url("sqlite://")
        owner = CallContext(caller="0xowner")
        catalog.initialize(owner)
        item = catalog.add_item(owner, "Widget", price=1, quantity=10)
        receipt = catalog.purchase(CallContext("0xbuyer", payment=5), item.id, 2)
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        value_transfer: ValueTransfer | None = None,
        clock: Clock | None = None,
        serialize_reads: bool = True,
    ):
        self._session_factory = session_factory
        self._value_transfer = value_transfer or InMemoryValueTransfer()
        self._clock = clock or SystemClock()
        self._serialize_reads = serialize_reads
        self._lock = threading.RLock()
        self._subscribers: list[EventSubscriber] = []
        register_immutability_listeners()

    @classmethod
    def from_url(
        cls,
        database_url: str,
        *,
        create_schema: bool = True,
        value_transfer: ValueTransfer | None = None,
        clock: Clock | None = None,
        serialize_reads: bool = True,
        **engine_kwargs,
    ) -> CatalogService:
        """Build an engine for ``database_url`` and a catalog on top of it."""
        engine = build_engine(database_url, **engine_kwargs)
        if create_schema:
            create_tables(engine)
        return cls(
            sessionmaker(bind=engine, expire_on_commit=False),
            value_transfer=value_transfer,
            clock=clock,
            serialize_reads=serialize_reads,
        )

    @classmethod
    def from_settings(
        cls,
        settings,
        *,
        value_transfer: ValueTransfer | None = None,
        clock: Clock | None = None,
    ) -> CatalogService:
        """Build a catalog from a ``catalog_config.CatalogSettings``, configuring logging too."""
        configure_logging(level=settings.log_level)
        return cls.from_url(
            settings.database_url,
            create_schema=settings.create_schema,
            value_transfer=value_transfer,
            clock=clock,
            serialize_reads=settings.serialize_reads,
            echo=settings.echo,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
        )

    @property
    def value_transfer(self) -> ValueTransfer:
        return self._value_transfer

    # ------------------------------------------------------------------
    # Transaction plumbing
    # ------------------------------------------------------------------

    def _mutate(
        self,
        operation: str,
        ctx: CallContext,
        work: Callable[[_UnitOfWork], T],
        item_id: int | None = None,
    ) -> T:
        with self._lock, LogContext.bind(
            correlation_id=uuid4().hex,
            actor=ctx.caller,
            operation=operation,
            item_id=item_id,
        ):
            try:
                with session_scope(self._session_factory) as session:
                    uow = _UnitOfWork.open(session, self._clock)
                    result = work(uow)
                    committed = uow.event_log.pending
            except CatalogKernelError as exc:
                logger.warning("operation_rejected", extra={"error": exc})
                raise
            self._publish(committed)
            return result

    def _read(self, work: Callable[[CatalogSelector], T]) -> T:
        if self._serialize_reads:
            with self._lock, session_scope(self._session_factory) as session:
                return work(CatalogSelector(session))
        with session_scope(self._session_factory) as session:
            return work(CatalogSelector(session))

    # ------------------------------------------------------------------
    # Event push interface
    # ------------------------------------------------------------------

    def subscribe(self, callback: EventSubscriber) -> None:
        """Receive every committed event from now on, in seq order."""
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventSubscriber) -> None:
        with self._lock:
            self._subscribers.remove(callback)

    def _publish(self, records: list[CatalogEventRecord]) -> None:
        for record in records:
            for callback in list(self._subscribers):
                try:
                    callback(record)
                except Exception:
                    # The commit already happened; keep notifying the others
                    logger.exception(
                        "event_subscriber_failed",
                        extra={"seq": record.seq, "event_type": record.event_type},
                    )

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def initialize(self, ctx: CallContext) -> None:
        """Make the calling identity the owner of an empty catalog."""

        def work(uow: _UnitOfWork) -> None:
            SequenceService(uow.session).initialize_sequences()
            uow.access.initialize(ctx.caller)

        self._mutate("initialize", ctx, work)

    def transfer_ownership(self, ctx: CallContext, new_owner: str) -> str:
        """Returns the previous owner."""
        return self._mutate(
            "transfer_ownership",
            ctx,
            lambda uow: uow.access.transfer_ownership(ctx.caller, new_owner),
        )

    def owner(self) -> str | None:
        return self._read(lambda q: q.get_owner())

    # ------------------------------------------------------------------
    # Administrative operations
    # ------------------------------------------------------------------

    def add_item(self, ctx: CallContext, name: str, price: int, quantity: int) -> ItemInfo:
        return self._mutate(
            "add_item",
            ctx,
            lambda uow: ItemInfo.from_model(
                uow.admin.add_item(ctx.caller, name, price, quantity)
            ),
        )

    def lock_item(self, ctx: CallContext, item_id: int) -> ItemInfo:
        return self._mutate(
            "lock_item",
            ctx,
            lambda uow: ItemInfo.from_model(uow.admin.lock_item(ctx.caller, item_id)),
            item_id=item_id,
        )

    def unlock_item(self, ctx: CallContext, item_id: int) -> ItemInfo:
        return self._mutate(
            "unlock_item",
            ctx,
            lambda uow: ItemInfo.from_model(uow.admin.unlock_item(ctx.caller, item_id)),
            item_id=item_id,
        )

    def restock_item(self, ctx: CallContext, item_id: int, added: int) -> ItemInfo:
        return self._mutate(
            "restock_item",
            ctx,
            lambda uow: ItemInfo.from_model(
                uow.admin.restock_item(ctx.caller, item_id, added)
            ),
            item_id=item_id,
        )

    def change_item_status(
        self, ctx: CallContext, item_id: int, is_active: bool
    ) -> ItemInfo:
        return self._mutate(
            "change_item_status",
            ctx,
            lambda uow: ItemInfo.from_model(
                uow.admin.change_item_status(ctx.caller, item_id, is_active)
            ),
            item_id=item_id,
        )

    def update_item_price(self, ctx: CallContext, item_id: int, new_price: int) -> ItemInfo:
        return self._mutate(
            "update_item_price",
            ctx,
            lambda uow: ItemInfo.from_model(
                uow.admin.update_item_price(ctx.caller, item_id, new_price)
            ),
            item_id=item_id,
        )

    def emergency_stop(self, ctx: CallContext) -> int:
        """Returns the number of items marked unavailable."""
        return self._mutate(
            "emergency_stop", ctx, lambda uow: uow.admin.emergency_stop(ctx.caller)
        )

    # ------------------------------------------------------------------
    # Purchase workflows
    # ------------------------------------------------------------------

    def buy(self, ctx: CallContext, item_id: int, quantity: int) -> PurchaseReceipt:
        """Legacy buy paid with ``ctx.payment``.  Overpayment is not returned."""
        return self._mutate(
            "buy",
            ctx,
            lambda uow: uow.engine.buy(item_id, quantity, ctx.payment, ctx.caller),
            item_id=item_id,
        )

    def purchase(self, ctx: CallContext, item_id: int, amount: int) -> PurchaseReceipt:
        """
        Purchase paid with ``ctx.payment``; the excess goes back to the caller.

        Raises:
            RefundTransferError: the purchase committed but the refund could
                not be delivered.  The error carries the receipt.
        """
        receipt = self._mutate(
            "purchase",
            ctx,
            lambda uow: uow.engine.purchase(item_id, amount, ctx.payment, ctx.caller),
            item_id=item_id,
        )
        if receipt.refund > 0:
            self._send_refund(receipt)
        return receipt

    def _send_refund(self, receipt: PurchaseReceipt) -> None:
        try:
            self._value_transfer.transfer_value(receipt.buyer, receipt.refund)
        except Exception as exc:
            logger.error(
                "refund_transfer_failed",
                exc_info=True,
                extra={"receipt": receipt},
            )
            raise RefundTransferError(receipt, receipt.buyer, receipt.refund, str(exc)) from exc
        logger.info("refund_sent", extra={"receipt": receipt})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_item(self, item_id: int) -> ItemInfo:
        return self._read(lambda q: q.get_item(item_id))

    def list_items(self) -> list[ItemInfo]:
        return self._read(lambda q: q.list_items())

    def get_available_items(self) -> AvailableItems:
        return self._read(lambda q: q.get_available_items())

    def get_all_item_ids(self) -> list[int]:
        return self._read(lambda q: q.get_all_item_ids())

    def get_user_purchases(self, user: str, item_id: int) -> int:
        return self._read(lambda q: q.get_user_purchases(user, item_id))

    def is_sold_out(self, item_id: int) -> bool:
        return self._read(lambda q: q.is_sold_out(item_id))

    def get_stock(self, item_id: int) -> int:
        return self._read(lambda q: q.get_stock(item_id))

    def get_total_item_count(self) -> int:
        return self._read(lambda q: q.get_total_item_count())

    def get_next_item_id(self) -> int:
        return self._read(lambda q: q.get_next_item_id())

    # ------------------------------------------------------------------
    # Event log reads
    # ------------------------------------------------------------------

    def events(
        self,
        since_seq: int = 0,
        item_id: int | None = None,
        event_type: CatalogEventType | None = None,
    ) -> list[CatalogEventRecord]:
        def work(q: CatalogSelector) -> list[CatalogEventRecord]:
            return EventLogService(q.session, self._clock).events(
                since_seq=since_seq, item_id=item_id, event_type=event_type
            )

        return self._read(work)

    def validate_event_chain(self) -> bool:
        """
        Raises:
            EventChainBrokenError: on the first inconsistent event.
        """
        return self._read(
            lambda q: EventLogService(q.session, self._clock).validate_chain()
        )
