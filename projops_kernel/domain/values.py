"""
Values -- shared enumerations for the tax and schedule domains.

Responsibility:
    Defines the closed vocabularies that engines, ORM models and services
    all speak: tax regime, purchase order status, milestone status, delay
    attribution and the kind of entity a delay log entry refers to.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Imported by projops_engines,
    projops_kernel.models and projops_modules.

Every enum subclasses ``str`` so that values round-trip through String
columns and JSON logs unchanged.
"""

from __future__ import annotations

from enum import Enum


class TaxRegime(str, Enum):
    """GST regime of a purchase order.

    SPLIT is intra-state supply (CGST + SGST, each half the rate).
    SINGLE is inter-state supply (IGST at the full rate).
    """

    SPLIT = "cgst_sgst"
    SINGLE = "igst"


class PurchaseOrderStatus(str, Enum):
    """Lifecycle status of a purchase order."""

    DRAFT = "draft"
    SENT = "sent"
    ACKNOWLEDGED = "acknowledged"
    PARTIALLY_RECEIVED = "partially-received"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (PurchaseOrderStatus.COMPLETED, PurchaseOrderStatus.CANCELLED)


class MilestoneStatus(str, Enum):
    """Status of a milestone.  Any status may move to any other."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()

    @property
    def icon(self) -> str:
        return _STATUS_ICONS[self]


_STATUS_ICONS: dict[MilestoneStatus, str] = {
    MilestoneStatus.NOT_STARTED: "⏳",
    MilestoneStatus.IN_PROGRESS: "🔄",
    MilestoneStatus.COMPLETED: "✅",
    MilestoneStatus.BLOCKED: "🚫",
}


class DelayAttribution(str, Enum):
    """Who or what caused a schedule change.

    The ``internal-`` / ``external-`` prefix drives the internal vs
    external split in delay statistics.
    """

    INTERNAL_TEAM = "internal-team"
    INTERNAL_PROCESS = "internal-process"
    EXTERNAL_CLIENT = "external-client"
    EXTERNAL_VENDOR = "external-vendor"
    EXTERNAL_OTHER = "external-other"

    @property
    def is_internal(self) -> bool:
        return self.value.startswith("internal-")

    @property
    def is_external(self) -> bool:
        return self.value.startswith("external-")

    @property
    def label(self) -> str:
        return _ATTRIBUTION_LABELS[self][0]

    @property
    def description(self) -> str:
        return _ATTRIBUTION_LABELS[self][1]

    @classmethod
    def parse(cls, value: DelayAttribution | str | None) -> DelayAttribution | None:
        """Coerce a raw value; ``None`` for missing or unknown input."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_ATTRIBUTION_LABELS: dict[DelayAttribution, tuple[str, str]] = {
    DelayAttribution.INTERNAL_TEAM: (
        "Internal - Team",
        "Team capacity, skill gaps, underestimation",
    ),
    DelayAttribution.INTERNAL_PROCESS: (
        "Internal - Process",
        "Process failures, unclear scope, planning gaps",
    ),
    DelayAttribution.EXTERNAL_CLIENT: (
        "External - Client",
        "Client delays, scope changes, approvals",
    ),
    DelayAttribution.EXTERNAL_VENDOR: (
        "External - Vendor",
        "Supplier delays, parts availability",
    ),
    DelayAttribution.EXTERNAL_OTHER: (
        "External - Other",
        "Weather, regulatory, unforeseen circumstances",
    ),
}


class DelayEntityType(str, Enum):
    """What a delay log entry moved: a milestone date or the project deadline."""

    PROJECT = "project"
    MILESTONE = "milestone"
