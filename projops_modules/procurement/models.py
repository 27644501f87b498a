"""
Procurement Domain Models.

The nouns of procurement as callers see them: vendors, purchase orders
and their lines.  Frozen views built from ORM rows; services never hand
ORM objects across the module boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from projops_engines.gst import POWarning, WarningSeverity
from projops_engines.po_totals import POLineItem
from projops_kernel.domain.values import PurchaseOrderStatus, TaxRegime
from projops_kernel.models.purchase_order import PurchaseOrder, PurchaseOrderLine
from projops_kernel.models.vendor import Vendor


@dataclass(frozen=True)
class VendorInfo:
    """A supplier and its GST identity."""

    id: UUID
    name: str
    gstin: str | None
    state_code: str | None
    email: str | None = None
    is_active: bool = True

    @classmethod
    def from_orm(cls, vendor: Vendor) -> VendorInfo:
        return cls(
            id=vendor.id,
            name=vendor.name,
            gstin=vendor.gstin,
            state_code=vendor.state_code,
            email=vendor.email,
            is_active=vendor.is_active,
        )


@dataclass(frozen=True)
class PurchaseOrderLineView:
    sl_no: int
    description: str
    quantity: Decimal
    rate: Decimal
    discount_percent: Decimal
    amount: Decimal
    uom: str = "nos"
    hsn: str | None = None
    item_code: str | None = None
    make: str | None = None
    bom_item_id: str | None = None

    @classmethod
    def from_orm(cls, line: PurchaseOrderLine) -> PurchaseOrderLineView:
        return cls(
            sl_no=line.sl_no,
            description=line.description,
            quantity=line.quantity,
            rate=line.rate,
            discount_percent=line.discount_percent,
            amount=line.amount,
            uom=line.uom,
            hsn=line.hsn,
            item_code=line.item_code,
            make=line.make,
            bom_item_id=line.bom_item_id,
        )

    def to_line_item(self) -> POLineItem:
        return POLineItem(
            description=self.description,
            quantity=self.quantity,
            rate=self.rate,
            discount_percent=self.discount_percent,
            hsn=self.hsn,
            uom=self.uom,
            item_code=self.item_code,
            make=self.make,
            bom_item_id=self.bom_item_id,
        )


@dataclass(frozen=True)
class PurchaseOrderView:
    """
    A purchase order as issued.

    Exactly one regime's tax amounts are set: ``igst_amount`` for SINGLE,
    ``cgst_amount`` and ``sgst_amount`` for SPLIT.
    """

    id: UUID
    po_number: str
    project_id: UUID
    vendor_id: UUID
    vendor_name: str
    vendor_gstin: str | None
    vendor_state_code: str | None
    invoice_to_company: str
    invoice_to_gstin: str
    invoice_to_state_code: str
    po_date: date
    tax_type: TaxRegime
    tax_percentage: Decimal
    subtotal: Decimal
    total_amount: Decimal
    amount_in_words: str
    status: PurchaseOrderStatus
    igst_amount: Decimal | None = None
    cgst_amount: Decimal | None = None
    sgst_amount: Decimal | None = None
    currency: str = "INR"
    payment_terms: str | None = None
    delivery_terms: str | None = None
    expected_delivery_date: date | None = None
    sent_at: datetime | None = None
    sent_to_email: str | None = None
    closed_at: datetime | None = None
    lines: tuple[PurchaseOrderLineView, ...] = ()
    warnings: tuple[dict, ...] = ()

    @classmethod
    def from_orm(cls, po: PurchaseOrder) -> PurchaseOrderView:
        return cls(
            id=po.id,
            po_number=po.po_number,
            project_id=po.project_id,
            vendor_id=po.vendor_id,
            vendor_name=po.vendor_name,
            vendor_gstin=po.vendor_gstin,
            vendor_state_code=po.vendor_state_code,
            invoice_to_company=po.invoice_to_company,
            invoice_to_gstin=po.invoice_to_gstin,
            invoice_to_state_code=po.invoice_to_state_code,
            po_date=po.po_date,
            tax_type=TaxRegime(po.tax_type),
            tax_percentage=po.tax_percentage,
            subtotal=po.subtotal,
            total_amount=po.total_amount,
            amount_in_words=po.amount_in_words,
            status=PurchaseOrderStatus(po.status),
            igst_amount=po.igst_amount,
            cgst_amount=po.cgst_amount,
            sgst_amount=po.sgst_amount,
            currency=po.currency,
            payment_terms=po.payment_terms,
            delivery_terms=po.delivery_terms,
            expected_delivery_date=po.expected_delivery_date,
            sent_at=po.sent_at,
            sent_to_email=po.sent_to_email,
            closed_at=po.closed_at,
            lines=tuple(PurchaseOrderLineView.from_orm(line) for line in po.lines),
            warnings=tuple(po.warnings or ()),
        )


@dataclass(frozen=True)
class PurchaseOrderResult:
    """
    Outcome of raising a purchase order.

    Warnings do not block a draft; they are shown to the user and stored
    on the PO.
    """

    purchase_order: PurchaseOrderView
    warnings: tuple[POWarning, ...] = field(default_factory=tuple)

    @property
    def has_errors(self) -> bool:
        return any(w.severity == WarningSeverity.ERROR for w in self.warnings)
