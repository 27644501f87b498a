"""
OpsConfig schema.

Frozen dataclasses describing the company, purchase order and schedule
settings.  YAML files are parsed into these types by the loader; services
receive an ``OpsConfig`` and never read files or environment variables
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompanySettings:
    """The buyer: whose GSTIN and state code go on every purchase order."""

    name: str
    gstin: str = ""
    state_code: str = ""
    address: str = ""
    pan: str = ""
    phone: str | None = None
    email: str | None = None
    website: str | None = None

    @property
    def missing_tax_fields(self) -> list[str]:
        """Fields that must be set before a purchase order can be raised."""
        missing = []
        if not self.gstin:
            missing.append("gstin")
        if not self.state_code:
            missing.append("state_code")
        return missing


# ---------------------------------------------------------------------------
# Purchase orders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class POSettings:
    prefix: str = "PO"
    number_format: str = "simple"  # simple | financial-year
    starting_number: int = 1
    default_tax_percent: Decimal = Decimal("18")
    currency: str = "INR"
    default_payment_terms: str | None = None
    default_delivery_terms: str | None = None


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduleSettings:
    min_reason_length: int = 20
    min_name_length: int = 3
    max_name_length: int = 100
    delayed_threshold_days: int = 7


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OpsConfig:
    """Root configuration object handed to services."""

    config_id: str
    version: int
    company: CompanySettings
    purchase_orders: POSettings = field(default_factory=POSettings)
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    checksum: str = ""
