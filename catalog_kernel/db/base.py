"""
Module: catalog_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the type annotation map for consistent column types and the TrackedBase
    mixin for creation/update timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Integer amounts: prices, counters and payments are whole numbers in the
      smallest currency unit.  int maps to BigInteger system-wide.  NEVER use
      float for amounts.
    - Timestamps are timezone-aware.

Audit relevance:
    TrackedBase.created_at and updated_at are bookkeeping metadata; the
    authoritative history of every change is the catalog event trail.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the system inherits from Base (or TrackedBase).
        Models declare their own primary keys: item ids and event sequence
        numbers are allocated by SequenceService, never by the database.

    Guarantees:
        - datetime maps to DateTime(timezone=True) -- always timezone-aware.
        - int maps to BigInteger -- safe for monotonic sequences and amounts.
        - str maps to Text; identities and item names have no length cap.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        int: BigInteger,
        str: Text,
    }


class TrackedBase(Base):
    """
    Abstract base with timestamp and actor tracking.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at auto-updates on every UPDATE (via onupdate=func.now()).
        - created_by is required (NOT NULL) -- every record has a creator.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
