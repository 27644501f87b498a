"""
Module: projops_kernel.models.purchase_order
Responsibility: ORM persistence for purchase orders and their line items.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - po_number is unique (uq_po_number).  The INSERT is the uniqueness
      check; there is no read-then-write.
    - Exactly one regime's tax fields are populated: igst_amount for
      SINGLE, cgst_amount and sgst_amount for SPLIT.  The others are NULL.
    - Vendor and buyer tax identity is snapshotted at creation so a later
      vendor edit does not change an issued document.

Failure modes:
    - IntegrityError on duplicate po_number, translated to
      DuplicatePONumberError by PurchaseOrderService.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projops_kernel.db.base import TrackedBase, UUIDString
from projops_kernel.domain.values import PurchaseOrderStatus, TaxRegime


class PurchaseOrder(TrackedBase):
    """A purchase order raised against one vendor for one project."""

    __tablename__ = "purchase_orders"

    __table_args__ = (
        UniqueConstraint("po_number", name="uq_po_number"),
        Index("idx_po_project", "project_id"),
        Index("idx_po_vendor", "vendor_id"),
        Index("idx_po_status", "status"),
    )

    po_number: Mapped[str] = mapped_column(
        String(60),
        nullable=False,
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    vendor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("vendors.id"),
        nullable=False,
    )

    # Vendor snapshot
    vendor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    vendor_gstin: Mapped[str | None] = mapped_column(String(15), nullable=True)
    vendor_state_code: Mapped[str | None] = mapped_column(String(2), nullable=True)
    vendor_state_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Buyer snapshot (company settings at creation)
    invoice_to_company: Mapped[str] = mapped_column(String(200), nullable=False)
    invoice_to_gstin: Mapped[str] = mapped_column(String(15), nullable=False)
    invoice_to_state_code: Mapped[str] = mapped_column(String(2), nullable=False)

    po_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    tax_type: Mapped[TaxRegime] = mapped_column(
        String(20),
        nullable=False,
    )

    tax_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )

    subtotal: Mapped[Decimal] = mapped_column(nullable=False)
    igst_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    cgst_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    sgst_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)

    amount_in_words: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        default="INR",
        nullable=False,
    )

    payment_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    vendor_quote_reference: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    status: Mapped[PurchaseOrderStatus] = mapped_column(
        String(30),
        default=PurchaseOrderStatus.DRAFT,
        nullable=False,
    )

    sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    sent_by_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    sent_to_email: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Set when the PO reaches completed or cancelled
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Validation warnings at creation, stored for reference
    warnings: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    lines: Mapped[list["PurchaseOrderLine"]] = relationship(
        back_populates="purchase_order",
        order_by="PurchaseOrderLine.sl_no",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<PurchaseOrder {self.po_number}: {PurchaseOrderStatus(self.status).value}>"


class PurchaseOrderLine(TrackedBase):
    """One item on a purchase order.  sl_no is 1-based in entry order."""

    __tablename__ = "purchase_order_lines"

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "sl_no", name="uq_po_line_sl_no"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    sl_no: Mapped[int] = mapped_column(Integer, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    item_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    make: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hsn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    uom: Mapped[str] = mapped_column(String(20), default="nos", nullable=False)
    bom_item_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    discount_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    purchase_order: Mapped[PurchaseOrder] = relationship(
        back_populates="lines",
    )
