"""
PO Totals Engine - subtotal, GST and grand total for a purchase order.

Pure functions with no I/O; the tax rate is a parameter.

Rounding rules:
    - each line amount is quantity * rate * (1 - discount/100), 2 dp;
    - SINGLE regime: igst = round2(subtotal * rate / 100);
    - SPLIT regime: cgst = sgst = round2(subtotal * (rate / 2) / 100),
      each rounded on its own, so cgst + sgst may differ from igst by
      0.01 at the same rate;
    - total is rounded to 2 dp; the amount in words uses the unrounded
      total rounded to whole rupees.

All rounding is ROUND_HALF_UP.

Usage:
    from decimal import Decimal
    from projops_engines.po_totals import POLineItem, calculate_po_totals
    from projops_kernel.domain.values import TaxRegime

    items = [POLineItem("Servo drive", quantity=Decimal("2"), rate=Decimal("5000"))]
    totals = calculate_po_totals(items, TaxRegime.SPLIT)
    totals.cgst_amount      # Decimal("900.00")
    totals.total_amount     # Decimal("11800.00")
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from projops_engines.amount_words import rupees_to_words
from projops_engines.tracer import traced_engine
from projops_kernel.domain.values import TaxRegime
from projops_kernel.logging_config import get_logger

logger = get_logger("engines.po_totals")

CENT = Decimal("0.01")
DEFAULT_GST_PERCENT = Decimal("18")
_HUNDRED = Decimal("100")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _dec(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class POLineItem:
    """
    One purchase order line.

    Immutable value object.  ``amount`` is derived unless an explicit
    ``amount_override`` is given by a caller that already holds one.
    """

    description: str
    quantity: Decimal
    rate: Decimal
    discount_percent: Decimal = Decimal("0")
    hsn: str | None = None
    uom: str = "nos"
    item_code: str | None = None
    make: str | None = None
    bom_item_id: str | None = None
    amount_override: Decimal | None = None

    def __post_init__(self) -> None:
        # Accept ints/strings/floats from callers; store Decimal
        object.__setattr__(self, "quantity", _dec(self.quantity))
        object.__setattr__(self, "rate", _dec(self.rate))
        object.__setattr__(self, "discount_percent", _dec(self.discount_percent))
        if self.amount_override is not None:
            object.__setattr__(self, "amount_override", _dec(self.amount_override))
        if self.discount_percent < 0 or self.discount_percent > _HUNDRED:
            raise ValueError(
                f"Discount must be between 0 and 100, got {self.discount_percent}"
            )

    @property
    def amount(self) -> Decimal:
        if self.amount_override is not None:
            return self.amount_override
        gross = self.quantity * self.rate
        return round2(gross * (_HUNDRED - self.discount_percent) / _HUNDRED)


@dataclass(frozen=True)
class POTotals:
    """
    Result of a PO total computation.

    Exactly one regime's tax fields are populated; the other regime's are
    ``None``, never zero.
    """

    subtotal: Decimal
    regime: TaxRegime
    rate_percent: Decimal
    total_amount: Decimal
    amount_in_words: str
    igst_amount: Decimal | None = None
    cgst_amount: Decimal | None = None
    sgst_amount: Decimal | None = None

    @property
    def tax_total(self) -> Decimal:
        if self.regime == TaxRegime.SINGLE:
            return self.igst_amount or Decimal("0")
        return (self.cgst_amount or Decimal("0")) + (self.sgst_amount or Decimal("0"))

    def as_dict(self) -> dict[str, Any]:
        """Plain dict with the inapplicable regime's fields omitted."""
        data: dict[str, Any] = {
            "subtotal": self.subtotal,
            "tax_type": self.regime.value,
            "tax_percentage": self.rate_percent,
            "igst_amount": self.igst_amount,
            "cgst_amount": self.cgst_amount,
            "sgst_amount": self.sgst_amount,
            "total_amount": self.total_amount,
            "amount_in_words": self.amount_in_words,
        }
        return {k: v for k, v in data.items() if v is not None}


@traced_engine("po_totals", "1.0", fingerprint_fields=("items", "regime", "rate_percent"))
def calculate_po_totals(
    items: Sequence[POLineItem],
    regime: TaxRegime | str,
    rate_percent: Decimal | int | str = DEFAULT_GST_PERCENT,
) -> POTotals:
    """
    Compute subtotal, GST and total for a set of line items.

    Args:
        items: Line items; may be empty.
        regime: TaxRegime or its string value.
        rate_percent: Nominal GST rate in percent (18 for 18%).

    Raises:
        ValueError: If the rate is negative or the regime unknown.
    """
    t0 = time.monotonic()
    regime = TaxRegime(regime)
    rate = _dec(rate_percent)
    if rate < 0:
        raise ValueError("Tax rate cannot be negative")

    logger.debug(
        "po_totals_started",
        extra={"item_count": len(items), "regime": regime.value, "rate_percent": str(rate)},
    )

    subtotal = sum((item.amount for item in items), Decimal("0"))

    igst = cgst = sgst = None
    if regime == TaxRegime.SINGLE:
        igst = round2(subtotal * rate / _HUNDRED)
        unrounded_total = subtotal + igst
    else:
        half = round2(subtotal * (rate / 2) / _HUNDRED)
        cgst = sgst = half
        unrounded_total = subtotal + cgst + sgst

    totals = POTotals(
        subtotal=subtotal,
        regime=regime,
        rate_percent=rate,
        igst_amount=igst,
        cgst_amount=cgst,
        sgst_amount=sgst,
        total_amount=round2(unrounded_total),
        amount_in_words=rupees_to_words(unrounded_total),
    )

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info(
        "po_totals_completed",
        extra={
            "item_count": len(items),
            "regime": regime.value,
            "subtotal": str(subtotal),
            "total_amount": str(totals.total_amount),
            "duration_ms": duration_ms,
        },
    )

    return totals
