"""Pure domain primitives shared by engines and services: clock, actor, enums."""

from projops_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
)
from projops_kernel.domain.identity import Actor
from projops_kernel.domain.values import (
    DelayAttribution,
    DelayEntityType,
    MilestoneStatus,
    PurchaseOrderStatus,
    TaxRegime,
)

__all__ = [
    "Actor",
    "Clock",
    "DelayAttribution",
    "DelayEntityType",
    "DeterministicClock",
    "MilestoneStatus",
    "PurchaseOrderStatus",
    "SystemClock",
    "TaxRegime",
]
