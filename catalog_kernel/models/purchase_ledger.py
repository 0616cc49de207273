"""
Module: catalog_kernel.models.purchase_ledger
Responsibility: ORM persistence for per-(buyer, item) cumulative purchase
    counters.
Architecture position: Kernel > Models.  May import from db/base.py only.

Neither purchase workflow writes to this table; CatalogSelector reads it and
reports zero for every pair without a row.  The table exists so the read
interface is backed by real storage.
"""

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_kernel.db.base import Base


class PurchaseLedgerEntry(Base):
    """Cumulative quantity purchased by one buyer for one item."""

    __tablename__ = "purchase_ledger"

    __table_args__ = (
        CheckConstraint("total_purchased >= 0", name="ck_ledger_non_negative"),
    )

    buyer: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
    )

    item_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("items.id"),
        primary_key=True,
        autoincrement=False,
    )

    total_purchased: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<PurchaseLedgerEntry {self.buyer!r}:{self.item_id}={self.total_purchased}>"
