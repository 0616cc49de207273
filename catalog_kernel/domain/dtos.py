"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures returned by catalog operations and
    queries: ItemInfo (item snapshot), AvailableItems (parallel projection),
    PurchaseReceipt (purchase outcome) and CatalogEventRecord (committed
    event pushed to subscribers).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers.

Invariants enforced:
    - Services and selectors return DTOs, never ORM entities, so no caller
      can mutate registry state outside a transaction.
    - CatalogEventRecord payloads are read-only mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from catalog_kernel.models.catalog_event import CatalogEvent as CatalogEventModel
    from catalog_kernel.models.item import Item as ItemModel


class PurchaseWorkflow(str, Enum):
    """Which of the two purchase workflows produced a receipt."""

    BUY = "buy"  # Legacy path, depletes stock, never refunds
    PURCHASE = "purchase"  # Depletes quantity, refunds overpayment


@dataclass(frozen=True)
class ItemInfo:
    """Immutable snapshot of one catalog item."""

    id: int
    name: str
    unit_price: int
    stock: int
    quantity: int
    is_available: bool
    locked: bool
    exists: bool

    @property
    def is_sold_out(self) -> bool:
        return self.stock == 0

    @classmethod
    def from_model(cls, item: ItemModel) -> ItemInfo:
        return cls(
            id=item.id,
            name=item.name,
            unit_price=item.unit_price,
            stock=item.stock,
            quantity=item.quantity,
            is_available=item.is_available,
            locked=item.locked,
            exists=item.exists,
        )


@dataclass(frozen=True)
class AvailableItems:
    """
    Four equal-length parallel sequences describing purchasable items.

    Entries follow registry insertion order.
    """

    ids: tuple[int, ...] = ()
    names: tuple[str, ...] = ()
    prices: tuple[int, ...] = ()
    stocks: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        lengths = {len(self.ids), len(self.names), len(self.prices), len(self.stocks)}
        if len(lengths) != 1:
            raise ValueError("AvailableItems sequences must have equal length")

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self):
        """Unpack as ``ids, names, prices, stocks``."""
        return iter((self.ids, self.names, self.prices, self.stocks))


@dataclass(frozen=True)
class PurchaseReceipt:
    """
    Outcome of a committed buy() or purchase().

    ``remaining`` is the counter the workflow depletes: stock for BUY,
    quantity for PURCHASE.  ``refund`` is always 0 for BUY.
    """

    workflow: PurchaseWorkflow
    item_id: int
    buyer: str
    quantity: int
    unit_price: int
    total_cost: int
    paid_amount: int
    refund: int
    remaining: int

    @property
    def net_debit(self) -> int:
        """What the buyer ends up paying once the refund is returned."""
        return self.paid_amount - self.refund


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class CatalogEventRecord:
    """Immutable view of one committed catalog event."""

    seq: int
    event_type: str
    item_id: int | None
    actor: str
    occurred_at: datetime
    payload: Mapping[str, Any]
    hash: str

    @classmethod
    def from_model(cls, event: CatalogEventModel) -> CatalogEventRecord:
        event_type = event.event_type
        return cls(
            seq=event.seq,
            event_type=getattr(event_type, "value", event_type),
            item_id=event.item_id,
            actor=event.actor,
            occurred_at=_as_utc(event.occurred_at),
            payload=MappingProxyType(dict(event.payload or {})),
            hash=event.hash,
        )
