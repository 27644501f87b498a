"""
Module: projops_kernel.models.milestone
Responsibility: ORM persistence for project milestones.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - original_planned_end_date is frozen once set while the project is
      baselined (ORM listener in db/immutability.py).
    - sort_order is unique per project by construction (max + 1 on insert,
      dense renumbering on reorder); not a database constraint so reorders
      can swap values inside one flush.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projops_kernel.db.base import TrackedBase, UUIDString
from projops_kernel.domain.values import MilestoneStatus


class Milestone(TrackedBase):
    """
    A dated checkpoint inside a project.

    Dates are calendar dates.  ``current_planned_end_date`` is the working
    plan; ``original_planned_end_date`` is the baseline copy used for slip
    and cascade-risk computation.
    """

    __tablename__ = "milestones"

    __table_args__ = (
        Index("idx_milestone_project_order", "project_id", "sort_order"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    status: Mapped[MilestoneStatus] = mapped_column(
        String(20),
        default=MilestoneStatus.NOT_STARTED,
        nullable=False,
    )

    current_planned_end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    original_planned_end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    # Stamped when the status moves to completed
    actual_end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    progress_note: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    last_progress_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    project: Mapped["Project"] = relationship(  # noqa: F821
        back_populates="milestones",
    )

    def __repr__(self) -> str:
        return f"<Milestone {self.name}: {MilestoneStatus(self.status).value}>"
