"""
PO number formatting.

Turns an already-allocated sequence number into a document number.  The
engine does not allocate or persist counters; see
projops_kernel.services.sequence_service for that.

Formats:
    simple          PO-QT-2025-001
    financial-year  PO/QT/25-26/001

The Indian financial year runs April to March.  Sequence numbers are
zero-padded to three digits and widen naturally past 999.
"""

from __future__ import annotations

from datetime import date
from enum import Enum


class PONumberFormat(str, Enum):
    SIMPLE = "simple"
    FINANCIAL_YEAR = "financial-year"


def financial_year_start(as_of: date) -> int:
    """Calendar year in which the financial year containing ``as_of`` began."""
    return as_of.year - 1 if as_of.month <= 3 else as_of.year


def financial_year_label(as_of: date) -> str:
    """
    Two-digit "YY-YY" label, e.g. "24-25".

    Each year is truncated to its last two digits independently, so the
    year starting 2099 is "99-00".
    """
    start = financial_year_start(as_of)
    return f"{str(start)[-2:]}-{str(start + 1)[-2:]}"


def generate_po_number(
    prefix: str,
    fmt: PONumberFormat | str,
    sequence_number: int,
    as_of: date,
) -> str:
    """
    Format a PO number.

    Args:
        prefix: Company PO prefix, e.g. "PO-QT" or "PO/QT".
        fmt: PONumberFormat or its string value.
        sequence_number: Number drawn from the prefix's counter.
        as_of: Issue date; supplies the calendar or financial year.

    Raises:
        ValueError: If ``fmt`` is not a known format.
    """
    fmt = PONumberFormat(fmt)
    padded = f"{sequence_number:03d}"

    if fmt == PONumberFormat.FINANCIAL_YEAR:
        return f"{prefix}/{financial_year_label(as_of)}/{padded}"

    return f"{prefix}-{as_of.year}-{padded}"
