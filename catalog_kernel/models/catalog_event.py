"""
Module: catalog_kernel.models.catalog_event
Responsibility: ORM persistence for the append-only, hash-chained catalog
    event trail.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Events are append-only; no UPDATE or DELETE (ORM listeners in
      db/immutability.py).
    - seq is strictly increasing, allocated by SequenceService.
    - hash = H(event_type | item_id | payload_hash | prev_hash).  Validated by
      EventLogService.validate_chain().

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.
    - EventChainBrokenError when chain validation detects a hash mismatch.

Audit relevance:
    CatalogEvent IS the event log.  Every committed state change -- item
    added, locked, unlocked, restocked, repriced, status changed, purchased,
    emergency stop, ownership transferred -- produces exactly one row in the
    same transaction as the change.  A rolled-back operation leaves none.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, BigInteger, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_kernel.db.base import Base


class CatalogEventType(str, Enum):
    """Kinds of committed catalog state change.

    Contract: Adding a new member requires a recording method on
    EventLogService.
    """

    ITEM_ADDED = "ItemAdded"
    ITEM_LOCKED = "ItemLocked"
    ITEM_UNLOCKED = "ItemUnlocked"
    ITEM_RESTOCKED = "ItemRestocked"
    ITEM_STATUS_CHANGED = "ItemStatusChanged"
    ITEM_PRICE_UPDATED = "ItemPriceUpdated"
    ITEM_PURCHASED = "ItemPurchased"
    EMERGENCY_STOP = "EmergencyStop"
    OWNERSHIP_TRANSFERRED = "OwnershipTransferred"


class CatalogEvent(Base):
    """
    One committed catalog state change.

    Contract:
        Rows are append-only.  Each row's hash includes the previous row's
        hash, so editing any historical row breaks the chain.

    Guarantees:
        - seq is unique and strictly increasing.
        - prev_hash is None only for the first event.
        - item_id is None for catalog-wide events (EmergencyStop,
          OwnershipTransferred).
    """

    __tablename__ = "catalog_events"

    __table_args__ = (
        Index("idx_catalog_event_item", "item_id"),
        Index("idx_catalog_event_type", "event_type"),
    )

    seq: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    event_type: Mapped[CatalogEventType] = mapped_column(
        String(50),
        nullable=False,
    )

    item_id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    # Who caused the change
    actor: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
    )

    payload_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    # Null only for the first event
    prev_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CatalogEvent #{self.seq} {self.event_type} item={self.item_id}>"

    @property
    def is_genesis(self) -> bool:
        """Check if this is the first event in the hash chain."""
        return self.prev_hash is None
