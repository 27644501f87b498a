"""
GST Engine - tax regime and counterparty checks for purchase orders.

Indian GST keys entirely off whether buyer and seller sit in the same
state.  The state is the two-character code that prefixes every GSTIN.
Pure functions with no I/O.

Usage:
    from projops_engines.gst import determine_tax_type, extract_jurisdiction_code

    seller = extract_jurisdiction_code("27AAACB1234F1Z5")   # "27"
    determine_tax_type("29", seller)                        # TaxRegime.SINGLE
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from projops_kernel.domain.values import TaxRegime
from projops_kernel.logging_config import get_logger

logger = get_logger("engines.gst")


INDIAN_STATE_CODES: dict[str, str] = {
    "01": "Jammu & Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "26": "Dadra & Nagar Haveli and Daman & Diu",
    "27": "Maharashtra",
    "28": "Andhra Pradesh (Old)",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman & Nicobar Islands",
    "36": "Telangana",
    "37": "Andhra Pradesh",
    "38": "Ladakh",
}

SETTINGS_HINT = "Please update in Settings → Vendors"


class WarningSeverity(str, Enum):
    """How a PO warning should be presented."""

    ERROR = "error"
    WARNING = "warning"


class POWarningKind(str, Enum):
    """What is wrong with the counterparty."""

    MISSING_TAX_ID = "missing_tax_id"
    MISSING_JURISDICTION = "missing_jurisdiction"


@dataclass(frozen=True)
class POWarning:
    """
    One problem found on a counterparty before raising a PO.

    ``field`` is the PO field the problem lands on, so a form can attach
    the message next to it.
    """

    kind: POWarningKind
    field: str
    message: str
    severity: WarningSeverity = WarningSeverity.ERROR

    def as_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "field": self.field,
            "message": self.message,
            "severity": self.severity.value,
        }


def state_name(code: str | None) -> str:
    """Display name for a state code; "Unknown" for anything off the table."""
    return INDIAN_STATE_CODES.get(code or "", "Unknown")


def determine_tax_type(buyer_code: str, seller_code: str) -> TaxRegime:
    """
    Pick the GST regime for a buyer/seller pair.

    Exact string equality means intra-state supply (CGST + SGST).  Two
    empty codes compare equal, so a draft PO with no state data on either
    side is treated as intra-state rather than refused.
    """
    if buyer_code == seller_code:
        return TaxRegime.SPLIT
    return TaxRegime.SINGLE


def extract_jurisdiction_code(tax_id: str | None) -> str | None:
    """State code from the first two characters of a GSTIN, if on the table."""
    if not tax_id or len(tax_id) < 2:
        return None
    code = tax_id[:2]
    return code if code in INDIAN_STATE_CODES else None


def _read(counterparty: Any, name: str) -> Any:
    if isinstance(counterparty, Mapping):
        return counterparty.get(name)
    return getattr(counterparty, name, None)


def validate_counterparty_for_po(counterparty: Any) -> list[POWarning]:
    """
    Check a vendor has the tax fields a PO needs.

    Accepts an object or a mapping exposing ``gstin`` and ``state_code``.
    Returns one error-severity warning per missing field; an empty string
    counts as missing.  Never raises.
    """
    warnings: list[POWarning] = []

    if not _read(counterparty, "gstin"):
        warnings.append(
            POWarning(
                kind=POWarningKind.MISSING_TAX_ID,
                field="vendorGstin",
                message=f"Vendor GSTIN not set. {SETTINGS_HINT}",
            )
        )

    if not _read(counterparty, "state_code"):
        warnings.append(
            POWarning(
                kind=POWarningKind.MISSING_JURISDICTION,
                field="vendorStateCode",
                message=f"Vendor State Code not set. {SETTINGS_HINT}",
            )
        )

    if warnings:
        logger.info(
            "counterparty_validation_warnings",
            extra={"fields": [w.field for w in warnings]},
        )

    return warnings
