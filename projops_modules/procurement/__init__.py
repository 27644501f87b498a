"""
Procurement Module (``projops_modules.procurement``).

Responsibility
--------------
Purchase orders against vendors: counterparty GST checks, numbering from a
per-prefix counter, CGST+SGST vs IGST totals with the amount in words, and
the draft -> sent -> closed lifecycle.

Architecture position
---------------------
**Modules layer** -- a service facade over ``projops_engines`` (gst,
po_totals, po_numbering) and the kernel ORM and ``SequenceService``.

Failure modes
-------------
* Vendor data gaps are warnings stored on the PO, not errors.
* Company settings gaps raise ``CompanySettingsError``.
* Database exceptions propagate after session rollback.
"""

from projops_modules.procurement.models import (
    PurchaseOrderLineView,
    PurchaseOrderResult,
    PurchaseOrderView,
    VendorInfo,
)
from projops_modules.procurement.service import PurchaseOrderService

__all__ = [
    "PurchaseOrderLineView",
    "PurchaseOrderResult",
    "PurchaseOrderService",
    "PurchaseOrderView",
    "VendorInfo",
]
