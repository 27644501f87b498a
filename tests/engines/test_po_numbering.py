"""Tests for PO number formatting and the Indian financial year."""

from datetime import date

import pytest

from projops_engines.po_numbering import (
    PONumberFormat,
    financial_year_label,
    financial_year_start,
    generate_po_number,
)


class TestSimpleFormat:
    def test_padding(self):
        assert generate_po_number("PO-QT", "simple", 1, date(2025, 6, 15)) == "PO-QT-2025-001"
        assert generate_po_number("PO-QT", "simple", 42, date(2025, 6, 15)) == "PO-QT-2025-042"

    def test_widens_past_999(self):
        assert (
            generate_po_number("PO-QT", PONumberFormat.SIMPLE, 1234, date(2025, 6, 15))
            == "PO-QT-2025-1234"
        )

    def test_uses_calendar_year(self):
        assert generate_po_number("PO-QT", "simple", 7, date(2026, 2, 1)) == "PO-QT-2026-007"


class TestFinancialYearFormat:
    @pytest.mark.parametrize(
        "as_of, expected",
        [
            (date(2025, 1, 15), "PO/QT/24-25/001"),
            (date(2025, 3, 31), "PO/QT/24-25/001"),
            (date(2025, 4, 1), "PO/QT/25-26/001"),
            (date(2025, 12, 31), "PO/QT/25-26/001"),
        ],
    )
    def test_year_boundary_is_april(self, as_of, expected):
        assert generate_po_number("PO/QT", "financial-year", 1, as_of) == expected

    def test_century_rollover(self):
        assert financial_year_label(date(2099, 4, 1)) == "99-00"
        assert financial_year_label(date(2100, 3, 31)) == "99-00"

    def test_financial_year_start(self):
        assert financial_year_start(date(2025, 3, 31)) == 2024
        assert financial_year_start(date(2025, 4, 1)) == 2025


class TestValidation:
    def test_unknown_format(self):
        with pytest.raises(ValueError):
            generate_po_number("PO", "monthly", 1, date(2025, 6, 15))
