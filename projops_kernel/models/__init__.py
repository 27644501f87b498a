"""ORM models for the project-operations kernel."""

from projops_kernel.models.delay_log import DelayLogModel
from projops_kernel.models.milestone import Milestone
from projops_kernel.models.project import Project
from projops_kernel.models.purchase_order import PurchaseOrder, PurchaseOrderLine
from projops_kernel.models.vendor import Vendor

__all__ = [
    "DelayLogModel",
    "Milestone",
    "Project",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "Vendor",
]
