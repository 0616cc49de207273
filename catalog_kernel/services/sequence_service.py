"""
SequenceService -- monotonic counter allocation via locked counter rows.

Responsibility:
    Provides strictly monotonically increasing numbers for item ids and
    catalog event sequence numbers.  Uses a dedicated counter table with
    row-level locking (``SELECT ... FOR UPDATE``) to guarantee uniqueness
    and ordering under concurrent access.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by ItemRegistry (``item_id``) and EventLogService
    (``catalog_event``).

Invariants enforced:
    - Monotonicity: the locked counter row is the sole source of truth for
      the next value.  The aggregate-max-plus-one pattern is never used.
    - Transactional: an increment is only visible after the caller's
      transaction commits.  Rollback returns the value, so a rejected
      item creation never consumes an id.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from catalog_kernel.db.base import Base
from catalog_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence with the last value handed out.
    Row-level locking ensures monotonicity under concurrency.
    """

    __tablename__ = "sequence_counters"

    # Sequence name (e.g., "item_id", "catalog_event")
    name: Mapped[str] = mapped_column(
        String(50),
        primary_key=True,
    )

    # Last allocated value (0 = nothing allocated yet)
    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Contract:
        Accepts a sequence name and returns the next strictly-monotonic
        integer value.  The increment is only committed when the caller's
        transaction commits.

    Guarantees:
        - The first value of every sequence is 1.
        - ``peek_next(name)`` always equals the value the next
          ``next_value(name)`` call will return.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    # Well-known sequence names
    ITEM_ID = "item_id"
    CATALOG_EVENT = "catalog_event"

    def __init__(self, session: Session):
        """
        Initialize the sequence service.

        Args:
            session: SQLAlchemy session (should be in a transaction).
        """
        self._session = session

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        1. Locks the sequence row (or creates it if it does not exist)
        2. Increments the counter
        3. Returns the new value

        Preconditions:
            - The caller is within an active database transaction.

        Postconditions:
            - Returns an integer > 0 that is strictly greater than any
              previously committed value for this sequence name.

        Args:
            sequence_name: Name of the sequence.

        Returns:
            The next sequence value (always > 0).
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            # First use of this sequence.  Another session may create it at the
            # same moment; a savepoint keeps the rest of the transaction intact.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._locked_counter(sequence_name)
                if counter is None:
                    raise

        counter.current_value += 1
        assert counter.current_value > 0, "sequence value must be strictly positive"
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int:
        """
        Get the last allocated value without incrementing.

        Returns:
            Last value handed out, or 0 if the sequence was never used.
        """
        counter = self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return counter.current_value if counter else 0

    def peek_next(self, sequence_name: str) -> int:
        """Value the next ``next_value`` call will return."""
        return self.current_value(sequence_name) + 1

    def initialize_sequences(self) -> None:
        """
        Create all well-known sequences at zero.

        Called during catalog initialization so counter rows exist before
        the first concurrent allocation.
        """
        for name in [self.ITEM_ID, self.CATALOG_EVENT]:
            existing = self._session.get(SequenceCounter, name)
            if existing is None:
                self._session.add(SequenceCounter(name=name, current_value=0))

        self._session.flush()
