"""
Module: catalog_kernel.models.item
Responsibility: ORM persistence for catalog items and the append-only
    ordered listing of assigned item ids.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - stock, quantity and unit_price are never negative (CHECK constraints;
      services guard every decrement before it happens).
    - stock and quantity are independent counters.  stock is depleted only
      by the legacy buy workflow; quantity only by purchase, and refilled
      only by restock.
    - exists is True iff the id has a row in item_listing.  Items are never
      deleted (ORM listener in db/immutability.py).
    - item_listing is append-only: positions are assigned once and rows are
      never updated or deleted.

Failure modes:
    - IntegrityError if a counter would go negative despite the guards.
    - ImmutabilityViolationError on DELETE of an Item or on UPDATE/DELETE
      of an ItemListing row.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from catalog_kernel.db.base import Base, TrackedBase


class Item(TrackedBase):
    """
    A sellable catalog entry.

    Contract:
        ``id`` is allocated by SequenceService (the ``item_id`` sequence) and
        is never reused.  The row is mutated in place by the purchase
        workflows and administrative operations.

    Guarantees:
        - stock >= 0, quantity >= 0, unit_price >= 0 (ck_item_* constraints).
        - is_available and locked are independent flags; only
          change_item_status writes both.
    """

    __tablename__ = "items"

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_item_stock_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_item_quantity_non_negative"),
        CheckConstraint("unit_price >= 0", name="ck_item_price_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    # Identities and names are unbounded text
    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Smallest currency unit
    unit_price: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    # Legacy buy counter
    stock: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    # Purchase / restock counter
    quantity: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    locked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    exists: Mapped[bool] = mapped_column(
        "item_exists",
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Item {self.id} {self.name!r} price={self.unit_price} "
            f"stock={self.stock} quantity={self.quantity}>"
        )

    @property
    def is_sold_out(self) -> bool:
        """True iff the legacy stock counter is exhausted."""
        return self.stock == 0


class ItemListing(Base):
    """
    One position in the ordered, append-only list of assigned item ids.

    Contract:
        Rows are inserted once, in creation order, and never updated,
        reordered or deleted.  Ordering by ``position`` reproduces insertion
        order.
    """

    __tablename__ = "item_listing"

    position: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    item_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("items.id"),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"<ItemListing #{self.position} -> {self.item_id}>"
