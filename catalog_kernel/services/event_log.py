"""
EventLogService -- append-only, hash-chained catalog event trail.

Responsibility:
    Creates one immutable CatalogEvent row for every committed state change,
    in the same transaction as the change.  Provides ordered reads of the
    trail and chain validation for tamper detection.

Architecture position:
    Kernel > Services -- imperative shell, called by AccessControlService,
    AdministrativeOps and PurchaseEngine.

Invariants enforced:
    - Sequence monotonicity via SequenceService (never max+1).
    - Chain integrity: ``hash = H(seq | event_type | item_id | payload_hash |
      prev_hash)``.
    - Append-only: event rows are never modified or deleted (ORM listeners
      in db/immutability.py).
    - Events are written only after the mutation they describe has been
      flushed, and become visible only when the transaction commits.  A
      rolled-back operation leaves no event.

Failure modes:
    - EventChainBrokenError: recomputed hash does not match stored hash, or
      prev_hash does not match the predecessor's hash.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog_kernel.domain.clock import Clock, SystemClock
from catalog_kernel.domain.dtos import CatalogEventRecord, PurchaseReceipt, PurchaseWorkflow
from catalog_kernel.exceptions import EventChainBrokenError
from catalog_kernel.logging_config import get_logger
from catalog_kernel.models.catalog_event import CatalogEvent, CatalogEventType
from catalog_kernel.services.base import BaseService
from catalog_kernel.services.sequence_service import SequenceService
from catalog_kernel.utils.hashing import hash_catalog_event, hash_payload

logger = get_logger("services.event_log")


class EventLogService(BaseService):
    """
    Service for appending and validating catalog events.

    Contract:
        Domain-specific ``record_*`` methods append one event each.  Events
        appended through this instance are remembered in ``pending`` so the
        caller can publish them once the transaction commits.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT notify subscribers; CatalogService does that after commit.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequence_service = SequenceService(session)
        self._pending: list[CatalogEvent] = []

    @property
    def pending(self) -> list[CatalogEventRecord]:
        """Events appended by this instance, in seq order."""
        return [CatalogEventRecord.from_model(e) for e in self._pending]

    def _get_last_hash(self) -> str | None:
        last_event = self.session.execute(
            select(CatalogEvent)
            .order_by(CatalogEvent.seq.desc())
            .limit(1)
        ).scalar_one_or_none()

        return last_event.hash if last_event else None

    def _append(
        self,
        event_type: CatalogEventType,
        actor: str,
        payload: dict[str, Any],
        item_id: int | None = None,
    ) -> CatalogEvent:
        seq = self._sequence_service.next_value(SequenceService.CATALOG_EVENT)
        prev_hash = self._get_last_hash()
        payload_hash = hash_payload(payload)

        event = CatalogEvent(
            seq=seq,
            event_type=event_type.value,
            item_id=item_id,
            actor=actor,
            occurred_at=self._clock.now(),
            payload=payload,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
            hash=hash_catalog_event(
                seq=seq,
                event_type=event_type.value,
                item_id=item_id,
                payload_hash=payload_hash,
                prev_hash=prev_hash,
            ),
        )

        self.session.add(event)
        self.session.flush()
        self._pending.append(event)

        logger.info(
            "catalog_event_appended",
            extra={
                "seq": seq,
                "event_type": event_type.value,
                "event_item_id": item_id,
            },
        )
        return event

    # Domain-specific recording methods

    def record_item_added(
        self, actor: str, item_id: int, name: str, price: int, quantity: int, stock: int
    ) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_ADDED,
            actor,
            {
                "item_id": item_id,
                "name": name,
                "price": price,
                "quantity": quantity,
                "stock": stock,
            },
            item_id=item_id,
        )

    def record_item_locked(self, actor: str, item_id: int) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_LOCKED, actor, {"item_id": item_id}, item_id=item_id
        )

    def record_item_unlocked(self, actor: str, item_id: int) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_UNLOCKED, actor, {"item_id": item_id}, item_id=item_id
        )

    def record_item_restocked(
        self, actor: str, item_id: int, new_quantity: int
    ) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_RESTOCKED,
            actor,
            {"item_id": item_id, "new_quantity": new_quantity},
            item_id=item_id,
        )

    def record_status_changed(
        self, actor: str, item_id: int, is_active: bool
    ) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_STATUS_CHANGED,
            actor,
            {"item_id": item_id, "is_active": is_active},
            item_id=item_id,
        )

    def record_price_updated(
        self, actor: str, item_id: int, new_price: int
    ) -> CatalogEvent:
        return self._append(
            CatalogEventType.ITEM_PRICE_UPDATED,
            actor,
            {"item_id": item_id, "new_price": new_price},
            item_id=item_id,
        )

    def record_item_purchased(self, receipt: PurchaseReceipt) -> CatalogEvent:
        """
        Record either purchase workflow.

        The purchase workflow reports the remaining quantity; the legacy buy
        workflow reports the amount that was paid.
        """
        payload: dict[str, Any] = {
            "item_id": receipt.item_id,
            "buyer": receipt.buyer,
            "quantity": receipt.quantity,
            "total_cost": receipt.total_cost,
            "workflow": receipt.workflow.value,
        }
        if receipt.workflow is PurchaseWorkflow.PURCHASE:
            payload["remaining_quantity"] = receipt.remaining
        else:
            payload["paid_amount"] = receipt.paid_amount
        return self._append(
            CatalogEventType.ITEM_PURCHASED,
            receipt.buyer,
            payload,
            item_id=receipt.item_id,
        )

    def record_emergency_stop(self, actor: str, item_count: int) -> CatalogEvent:
        return self._append(
            CatalogEventType.EMERGENCY_STOP, actor, {"item_count": item_count}
        )

    def record_ownership_transferred(
        self, actor: str, previous_owner: str, new_owner: str
    ) -> CatalogEvent:
        return self._append(
            CatalogEventType.OWNERSHIP_TRANSFERRED,
            actor,
            {"previous_owner": previous_owner, "new_owner": new_owner},
        )

    # Reads

    def events(
        self,
        since_seq: int = 0,
        item_id: int | None = None,
        event_type: CatalogEventType | None = None,
    ) -> list[CatalogEventRecord]:
        """
        Committed events with ``seq > since_seq``, in seq order.

        Args:
            since_seq: Only return events after this sequence number.
            item_id: Restrict to one item's events.
            event_type: Restrict to one event type.
        """
        stmt = select(CatalogEvent).where(CatalogEvent.seq > since_seq)
        if item_id is not None:
            stmt = stmt.where(CatalogEvent.item_id == item_id)
        if event_type is not None:
            stmt = stmt.where(CatalogEvent.event_type == event_type.value)
        rows = self.session.execute(stmt.order_by(CatalogEvent.seq)).scalars().all()
        return [CatalogEventRecord.from_model(e) for e in rows]

    def validate_chain(self) -> bool:
        """
        Validate the entire event chain.

        Returns:
            True if every stored hash matches its recomputed value and every
            prev_hash matches its predecessor's hash.

        Raises:
            EventChainBrokenError: If chain validation fails at any point.
        """
        events = self.session.execute(
            select(CatalogEvent).order_by(CatalogEvent.seq)
        ).scalars().all()

        prev_hash: str | None = None
        for event in events:
            if event.prev_hash != prev_hash:
                logger.critical("event_chain_broken", extra={"seq": event.seq})
                raise EventChainBrokenError(
                    event.seq, prev_hash or "None", event.prev_hash or "None"
                )

            payload_hash = hash_payload(event.payload or {})
            if payload_hash != event.payload_hash:
                logger.critical("event_chain_broken", extra={"seq": event.seq})
                raise EventChainBrokenError(event.seq, payload_hash, event.payload_hash)

            event_type = getattr(event.event_type, "value", event.event_type)
            expected_hash = hash_catalog_event(
                seq=event.seq,
                event_type=event_type,
                item_id=event.item_id,
                payload_hash=event.payload_hash,
                prev_hash=event.prev_hash,
            )
            if event.hash != expected_hash:
                logger.critical("event_chain_broken", extra={"seq": event.seq})
                raise EventChainBrokenError(event.seq, expected_hash, event.hash)

            prev_hash = event.hash

        return True
