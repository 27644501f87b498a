"""
Procurement Module Service (``projops_modules.procurement.service``).

Responsibility
--------------
Orchestrates purchase order operations -- vendor registration, PO
creation with GST totals and numbering, total recalculation, status
changes and sending -- by delegating every computation to
``projops_engines`` and persistence to ``projops_kernel`` ORM models.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``PurchaseOrderService`` is the sole
public entry point for procurement writes.  It composes pure engines
(``gst``, ``po_totals``, ``po_numbering``) and the kernel
``SequenceService``.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on exception).
* PO numbers come from a locked per-prefix counter; the unique constraint
  on ``po_number`` is the final check, not a read-then-write.
* Exactly one regime's tax amounts are stored on a PO.
* Vendor and buyer tax identity are snapshotted onto the PO at creation.

Failure modes
-------------
* Company GSTIN / state code missing  -> ``CompanySettingsError``.
* Unknown project / vendor / PO  -> the matching ``*NotFoundError``.
* Duplicate PO number on insert  -> ``DuplicatePONumberError``.
* Send or status change not allowed  -> ``InvalidPOTransitionError``.
* Unexpected exception  -> session rolled back, exception re-raised.

Audit relevance
---------------
Structured log events carry PO numbers, regime, totals and status moves.
Counterparty warnings found at creation are stored on the PO itself.

Usage::

    service = PurchaseOrderService(session, clock=clock, config=config)
    result = service.create_purchase_order(
        project_id=project.id, vendor_id=vendor.id,
        items=[POLineItem(description="Servo drive", quantity=2, rate="45000")],
        actor=actor,
    )
    print(result.purchase_order.po_number, result.purchase_order.total_amount)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from projops_config.schema import OpsConfig
from projops_engines.gst import (
    determine_tax_type,
    extract_jurisdiction_code,
    state_name,
    validate_counterparty_for_po,
)
from projops_engines.po_numbering import generate_po_number
from projops_engines.po_totals import POLineItem, POTotals, calculate_po_totals
from projops_kernel.domain.clock import Clock, SystemClock
from projops_kernel.domain.identity import Actor
from projops_kernel.domain.values import PurchaseOrderStatus
from projops_kernel.exceptions import (
    CompanySettingsError,
    DuplicatePONumberError,
    InvalidPOTransitionError,
    ProjectNotFoundError,
    PurchaseOrderNotFoundError,
    VendorNotFoundError,
)
from projops_kernel.logging_config import LogContext, get_logger
from projops_kernel.models.project import Project
from projops_kernel.models.purchase_order import PurchaseOrder, PurchaseOrderLine
from projops_kernel.models.vendor import Vendor
from projops_kernel.services.sequence_service import SequenceService
from projops_modules.procurement.models import (
    PurchaseOrderLineView,
    PurchaseOrderResult,
    PurchaseOrderView,
    VendorInfo,
)

logger = get_logger("modules.procurement.service")


class PurchaseOrderService:
    """
    Orchestrates purchase order operations through engines and kernel.

    Contract
    --------
    * ``create_purchase_order`` returns a ``PurchaseOrderResult``; missing
      vendor tax data is reported as warnings and does not block a draft.
    * Queries return frozen views, never ORM rows.

    Guarantees
    ----------
    * Number allocation, PO header and lines share one transaction.
    * Clock is injectable; PO date, numbering year and timestamps come from it.
    """

    def __init__(
        self,
        session: Session,
        config: OpsConfig,
        clock: Clock | None = None,
    ):
        self._session = session
        self._config = config
        self._clock = clock or SystemClock()
        self._sequences = SequenceService(session)

    # =========================================================================
    # Loading helpers
    # =========================================================================

    def _load_po(self, po_id: UUID, for_update: bool = False) -> PurchaseOrder:
        stmt = select(PurchaseOrder).where(PurchaseOrder.id == po_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        po = self._session.execute(stmt).scalar_one_or_none()
        if po is None:
            raise PurchaseOrderNotFoundError(str(po_id))
        return po

    def _load_vendor(self, vendor_id: UUID) -> Vendor:
        vendor = self._session.get(Vendor, vendor_id)
        if vendor is None:
            raise VendorNotFoundError(str(vendor_id))
        return vendor

    # =========================================================================
    # Vendors
    # =========================================================================

    def register_vendor(
        self,
        name: str,
        actor: Actor,
        gstin: str | None = None,
        state_code: str | None = None,
        address: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> VendorInfo:
        """
        Add a supplier.

        When no state code is given it is taken from the GSTIN prefix, if
        that prefix is a known state.
        """
        gstin = (gstin or "").strip().upper() or None
        state_code = (state_code or "").strip() or extract_jurisdiction_code(gstin)

        try:
            vendor = Vendor(
                name=name.strip(),
                gstin=gstin,
                state_code=state_code,
                address=address,
                email=email,
                phone=phone,
                is_active=True,
                created_by_id=actor.user_id,
            )
            self._session.add(vendor)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "vendor_registered",
            extra={
                "vendor_id": str(vendor.id),
                "has_gstin": gstin is not None,
                "state_code": state_code,
            },
        )
        return VendorInfo.from_orm(vendor)

    def get_vendor(self, vendor_id: UUID) -> VendorInfo:
        return VendorInfo.from_orm(self._load_vendor(vendor_id))

    # =========================================================================
    # Purchase orders
    # =========================================================================

    def create_purchase_order(
        self,
        project_id: UUID,
        vendor_id: UUID,
        items: Sequence[POLineItem],
        actor: Actor,
        tax_percent: Decimal | int | str | None = None,
        payment_terms: str | None = None,
        delivery_terms: str | None = None,
        vendor_quote_reference: str | None = None,
        expected_delivery_date: date | None = None,
    ) -> PurchaseOrderResult:
        """
        Raise a draft purchase order.

        Steps, all in one transaction:
            1. Require the company GSTIN and state code.
            2. Check the vendor's tax fields (warnings only).
            3. Draw the next number from the prefix's counter.
            4. Pick the regime from the two state codes and compute totals.
            5. Insert the PO and its lines; the insert enforces uniqueness.

        Raises:
            CompanySettingsError: Company GSTIN or state code missing.
            ProjectNotFoundError / VendorNotFoundError: Unknown ids.
            DuplicatePONumberError: The drawn number already exists.
        """
        company = self._config.company
        po_settings = self._config.purchase_orders

        missing = company.missing_tax_fields
        if missing:
            logger.warning(
                "po_refused_company_settings",
                extra={"missing_fields": missing},
            )
            raise CompanySettingsError(missing)

        rate = Decimal(str(tax_percent)) if tax_percent is not None else po_settings.default_tax_percent

        with LogContext.bind(project_id=str(project_id), actor_id=actor.user_id):
            try:
                if self._session.get(Project, project_id) is None:
                    raise ProjectNotFoundError(str(project_id))
                vendor = self._load_vendor(vendor_id)

                warnings = validate_counterparty_for_po(vendor)

                today = self._clock.today()
                sequence_number = self._sequences.next_value(
                    SequenceService.po_counter(po_settings.prefix),
                    start=po_settings.starting_number,
                )
                po_number = generate_po_number(
                    po_settings.prefix,
                    po_settings.number_format,
                    sequence_number,
                    today,
                )

                regime = determine_tax_type(company.state_code, vendor.state_code or "")
                totals = calculate_po_totals(items, regime, rate)

                po = PurchaseOrder(
                    po_number=po_number,
                    project_id=project_id,
                    vendor_id=vendor.id,
                    vendor_name=vendor.name,
                    vendor_gstin=vendor.gstin,
                    vendor_state_code=vendor.state_code,
                    vendor_state_name=state_name(vendor.state_code) if vendor.state_code else None,
                    invoice_to_company=company.name,
                    invoice_to_gstin=company.gstin,
                    invoice_to_state_code=company.state_code,
                    po_date=today,
                    currency=po_settings.currency,
                    payment_terms=payment_terms or po_settings.default_payment_terms,
                    delivery_terms=delivery_terms or po_settings.default_delivery_terms,
                    vendor_quote_reference=vendor_quote_reference,
                    expected_delivery_date=expected_delivery_date,
                    status=PurchaseOrderStatus.DRAFT,
                    warnings=[w.as_dict() for w in warnings],
                    created_by_id=actor.user_id,
                )
                self._apply_totals(po, totals)
                for sl_no, item in enumerate(items, start=1):
                    po.lines.append(self._line_from_item(sl_no, item, actor))

                self._session.add(po)
                try:
                    self._session.flush()
                except IntegrityError as exc:
                    raise DuplicatePONumberError(po_number) from exc
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "purchase_order_created",
                extra={
                    "po_number": po_number,
                    "tax_type": totals.regime.value,
                    "subtotal": totals.subtotal,
                    "total_amount": totals.total_amount,
                    "line_count": len(items),
                    "warning_count": len(warnings),
                },
            )
            return PurchaseOrderResult(
                purchase_order=PurchaseOrderView.from_orm(po),
                warnings=tuple(warnings),
            )

    @staticmethod
    def _apply_totals(po: PurchaseOrder, totals: POTotals) -> None:
        po.tax_type = totals.regime
        po.tax_percentage = totals.rate_percent
        po.subtotal = totals.subtotal
        po.igst_amount = totals.igst_amount
        po.cgst_amount = totals.cgst_amount
        po.sgst_amount = totals.sgst_amount
        po.total_amount = totals.total_amount
        po.amount_in_words = totals.amount_in_words

    @staticmethod
    def _line_from_item(sl_no: int, item: POLineItem, actor: Actor) -> PurchaseOrderLine:
        return PurchaseOrderLine(
            sl_no=sl_no,
            description=item.description,
            item_code=item.item_code,
            make=item.make,
            hsn=item.hsn,
            uom=item.uom,
            bom_item_id=item.bom_item_id,
            quantity=item.quantity,
            rate=item.rate,
            discount_percent=item.discount_percent,
            amount=item.amount,
            created_by_id=actor.user_id,
        )

    def recalculate_totals(self, po_id: UUID, actor: Actor) -> PurchaseOrderView:
        """Recompute line amounts and totals from the stored lines, regime and rate."""
        try:
            po = self._load_po(po_id, for_update=True)
            items = [PurchaseOrderLineView.from_orm(line).to_line_item() for line in po.lines]
            for line, item in zip(po.lines, items):
                line.amount = item.amount
            totals = calculate_po_totals(items, po.tax_type, po.tax_percentage)
            self._apply_totals(po, totals)
            po.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "purchase_order_recalculated",
            extra={"po_number": po.po_number, "total_amount": totals.total_amount},
        )
        return PurchaseOrderView.from_orm(po)

    def update_status(
        self,
        po_id: UUID,
        status: PurchaseOrderStatus | str,
        actor: Actor,
    ) -> PurchaseOrderView:
        """
        Move a PO to any status.  Completed and cancelled stamp ``closed_at``
        and are final.

        Raises:
            InvalidPOTransitionError: The PO is already completed or cancelled.
        """
        status = PurchaseOrderStatus(status)
        try:
            po = self._load_po(po_id, for_update=True)
            current = PurchaseOrderStatus(po.status)
            if current.is_terminal and status != current:
                raise InvalidPOTransitionError(str(po_id), current.value, status.value)
            po.status = status
            if status.is_terminal and po.closed_at is None:
                po.closed_at = self._clock.now()
            po.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "purchase_order_status_changed",
            extra={
                "po_number": po.po_number,
                "from_status": current.value,
                "to_status": status.value,
            },
        )
        return PurchaseOrderView.from_orm(po)

    def send_purchase_order(
        self,
        po_id: UUID,
        sent_to_email: str,
        actor: Actor,
    ) -> PurchaseOrderView:
        """
        Mark a draft PO as sent to the vendor.

        Raises:
            InvalidPOTransitionError: The PO is not a draft.
        """
        try:
            po = self._load_po(po_id, for_update=True)
            current = PurchaseOrderStatus(po.status)
            if current != PurchaseOrderStatus.DRAFT:
                raise InvalidPOTransitionError(
                    str(po_id), current.value, PurchaseOrderStatus.SENT.value
                )
            po.status = PurchaseOrderStatus.SENT
            po.sent_at = self._clock.now()
            po.sent_by_id = actor.user_id
            po.sent_to_email = sent_to_email
            po.updated_by_id = actor.user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "purchase_order_sent",
            extra={"po_number": po.po_number, "actor_id": actor.user_id},
        )
        return PurchaseOrderView.from_orm(po)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, po_id: UUID) -> PurchaseOrderView:
        return PurchaseOrderView.from_orm(self._load_po(po_id))

    def list_for_project(self, project_id: UUID) -> list[PurchaseOrderView]:
        return self._list(PurchaseOrder.project_id == project_id)

    def list_by_vendor(self, vendor_id: UUID) -> list[PurchaseOrderView]:
        return self._list(PurchaseOrder.vendor_id == vendor_id)

    def list_by_status(self, status: PurchaseOrderStatus | str) -> list[PurchaseOrderView]:
        return self._list(PurchaseOrder.status == PurchaseOrderStatus(status).value)

    def _list(self, criterion) -> list[PurchaseOrderView]:
        rows = self._session.execute(
            select(PurchaseOrder)
            .where(criterion)
            .order_by(PurchaseOrder.po_date.desc(), PurchaseOrder.po_number.desc())
        ).scalars()
        return [PurchaseOrderView.from_orm(po) for po in rows]
