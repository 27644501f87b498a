"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing sequence numbers per named counter.  Purchase
    order numbering keeps one counter per PO prefix (``po:<prefix>``).  Uses a
    dedicated counter table with row-level locking (``SELECT ... FOR UPDATE``)
    so two concurrent PO creations can never draw the same number.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by PurchaseOrderService.

Invariants enforced:
    - Monotonicity: the locked counter row is the sole source of truth for
      the next value.  Aggregate max-plus-one over issued PO numbers is
      never used.
    - Transactional: the increment is only visible after the caller's
      transaction commits.  Rollback returns the value.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from projops_kernel.db.base import Base
from projops_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row is a named sequence holding the last value handed out.
    """

    __tablename__ = "sequence_counters"

    # e.g. "po:PO-QT"
    name: Mapped[str] = mapped_column(
        String(80),
        nullable=False,
        unique=True,
    )

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

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        seq = SequenceService(session).next_value(SequenceService.po_counter("PO-QT"))
    """

    PO_PREFIX = "po:"

    def __init__(self, session: Session):
        self._session = session

    @classmethod
    def po_counter(cls, prefix: str) -> str:
        """Counter name for purchase orders issued under ``prefix``."""
        return f"{cls.PO_PREFIX}{prefix}"

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str, start: int = 1) -> int:
        """
        Get the next value for a named sequence.

        Locks the counter row (creating it at ``start`` on first use),
        increments it and returns the new value.

        Args:
            sequence_name: Name of the sequence.
            start: First value handed out for a brand-new sequence.

        Returns:
            The next sequence value (always > 0).
        """
        if start < 1:
            raise ValueError(f"Sequence start must be positive, got {start}")

        counter = self._locked_counter(sequence_name)

        if counter is None:
            # Savepoint so a lost creation race does not roll back the caller's work
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=start)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": start},
                )
                return start
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
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing, or None."""
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return counter.current_value if counter else None

    def reset(self, sequence_name: str, value: int = 0) -> None:
        """
        Reset a sequence so the next allocation returns ``value + 1``.

        WARNING: Only for tests and data migrations.  Rewinding a PO counter
        in production reissues numbers and trips the po_number constraint.
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            counter = SequenceCounter(name=sequence_name, current_value=value)
            self._session.add(counter)
        else:
            counter.current_value = value

        self._session.flush()
