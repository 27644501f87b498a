"""
Module: projops_kernel.models.project
Responsibility: ORM persistence for projects and their baseline state.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Baseline is one-way: is_baselined goes False -> True exactly once,
      together with baselined_at and baselined_by_id (MilestoneService
      sets all three in the same commit as the milestone original dates).

Audit relevance:
    original_deadline vs current_deadline is the cumulative project delay
    reported in weekly status and stamped on every delay log entry.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projops_kernel.db.base import TrackedBase


class Project(TrackedBase):
    """
    A delivery project that owns milestones and purchase orders.

    Guarantees:
        - is_baselined never returns to False.
        - baselined_at comes from the injected clock, never the database.
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    client_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Deadline as agreed when the project was set up
    original_deadline: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    # Deadline as currently planned
    current_deadline: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    is_baselined: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    baselined_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    baselined_by_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    milestones: Mapped[list["Milestone"]] = relationship(  # noqa: F821
        back_populates="project",
        order_by="Milestone.sort_order",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        flag = "baselined" if self.is_baselined else "draft"
        return f"<Project {self.name}: {flag}>"
