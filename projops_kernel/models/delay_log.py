"""
Module: projops_kernel.models.delay_log
Responsibility: Append-only persistence of schedule changes on baselined
    projects.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - Immutable from creation: no UPDATE, no DELETE (ORM listeners in
      db/immutability.py).
    - delay_days == new_date - previous_date, in whole days; positive is a
      slip, negative an acceleration.
    - reason is at least 20 characters after trimming and attribution is
      one of the DelayAttribution values (checked before insert by the
      schedule engine).

Audit relevance:
    Every post-baseline date move is explained here with who, when, why and
    whose fault.  Delay statistics are computed from these rows only.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from projops_kernel.db.base import Base, UUIDString
from projops_kernel.domain.values import DelayAttribution, DelayEntityType


class DelayLogModel(Base):
    """One explained schedule change."""

    __tablename__ = "delay_logs"

    __table_args__ = (
        Index("idx_delay_log_project_logged", "project_id", "logged_at"),
        Index("idx_delay_log_entity", "entity_type", "entity_id"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    entity_type: Mapped[DelayEntityType] = mapped_column(
        String(20),
        nullable=False,
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    # Name at the time of the change; milestones can be renamed later
    entity_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    previous_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    new_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    delay_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    reason: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    attribution: Mapped[DelayAttribution] = mapped_column(
        String(30),
        nullable=False,
    )

    logged_by_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    logged_by_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Project-level delay (current vs original deadline) when logged
    cumulative_project_delay: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<DelayLog {self.entity_name}: {self.delay_days:+d}d>"
