"""
Module: projops_kernel.models.vendor
Responsibility: ORM persistence for suppliers that receive purchase orders.
Architecture position: Kernel > Models.  May import from db/base.py only.

A vendor without a GSTIN or state code can still exist; the gap is reported
as a warning when a purchase order is raised against it.
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from projops_kernel.db.base import TrackedBase


class Vendor(TrackedBase):
    """Supplier master record."""

    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    # 15-character GST identification number; first two chars are the state
    gstin: Mapped[str | None] = mapped_column(
        String(15),
        nullable=True,
    )

    state_code: Mapped[str | None] = mapped_column(
        String(2),
        nullable=True,
    )

    address: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    email: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Vendor {self.name} ({self.gstin or 'no GSTIN'})>"
