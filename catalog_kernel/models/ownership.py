"""
Module: catalog_kernel.models.ownership
Responsibility: ORM persistence for the single catalog owner.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one row exists (id is always OWNERSHIP_ROW_ID).
    - owner is never the null identity; AccessControlService rejects it
      before any write.
"""

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_kernel.db.base import TrackedBase

OWNERSHIP_ROW_ID = 1


class CatalogOwnership(TrackedBase):
    """The identity authorized to perform administrative mutations."""

    __tablename__ = "catalog_ownership"

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        default=OWNERSHIP_ROW_ID,
    )

    owner: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CatalogOwnership owner={self.owner!r}>"
