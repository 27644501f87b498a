"""
Tests for amount-in-words rendering.

Covers:
- Units, teens, tens, hundreds
- Thousand / Lakh / Crore boundaries and recursion above a crore
- Paise rounding, including the literal quirks kept for compatibility
- Whole-rupee rounding used on purchase orders
"""

from decimal import Decimal

import pytest

from projops_engines.amount_words import number_to_words, rupees_to_words


class TestBasicNumbers:
    def test_zero(self):
        assert number_to_words(0) == "Zero"

    @pytest.mark.parametrize(
        "amount, words",
        [
            (1, "INR One Only"),
            (9, "INR Nine Only"),
            (11, "INR Eleven Only"),
            (19, "INR Nineteen Only"),
            (20, "INR Twenty Only"),
            (99, "INR Ninety Nine Only"),
            (100, "INR One Hundred Only"),
            (999, "INR Nine Hundred Ninety Nine Only"),
        ],
    )
    def test_small_numbers(self, amount, words):
        assert number_to_words(amount) == words


class TestIndianScale:
    """Lakh is 10^5, crore 10^7."""

    @pytest.mark.parametrize(
        "amount, words",
        [
            (1000, "INR One Thousand Only"),
            (99999, "INR Ninety Nine Thousand Nine Hundred Ninety Nine Only"),
            (100000, "INR One Lakh Only"),
            (1000000, "INR Ten Lakh Only"),
            (
                9999999,
                "INR Ninety Nine Lakh Ninety Nine Thousand Nine Hundred Ninety Nine Only",
            ),
            (10000000, "INR One Crore Only"),
            (100000000, "INR Ten Crore Only"),
            (123456, "INR One Lakh Twenty Three Thousand Four Hundred Fifty Six Only"),
            (
                12345678,
                "INR One Crore Twenty Three Lakh Forty Five Thousand "
                "Six Hundred Seventy Eight Only",
            ),
        ],
    )
    def test_scale_words(self, amount, words):
        assert number_to_words(amount) == words

    def test_above_crore_recurses(self):
        assert number_to_words(1_000_000_000) == "INR One Hundred Crore Only"
        assert number_to_words(10**12) == "INR One Lakh Crore Only"

    @pytest.mark.parametrize(
        "amount, words",
        [
            (15000, "INR Fifteen Thousand Only"),
            (250000, "INR Two Lakh Fifty Thousand Only"),
            (1575000, "INR Fifteen Lakh Seventy Five Thousand Only"),
            (12500000, "INR One Crore Twenty Five Lakh Only"),
        ],
    )
    def test_real_world_po_amounts(self, amount, words):
        assert number_to_words(amount) == words


class TestPaise:
    def test_paise(self):
        assert number_to_words(Decimal("100.50")) == "INR One Hundred and Fifty Paise Only"
        assert number_to_words(Decimal("1000.99")) == "INR One Thousand and Ninety Nine Paise Only"
        assert number_to_words(Decimal("100.05")) == "INR One Hundred and Five Paise Only"

    def test_whole_amount_has_no_paise(self):
        assert number_to_words(Decimal("5000.00")) == "INR Five Thousand Only"

    def test_float_input_is_read_through_str(self):
        assert number_to_words(100.5) == "INR One Hundred and Fifty Paise Only"

    def test_float_rounds_as_written_not_as_binary(self):
        assert number_to_words(1.005) == "INR One and One Paise Only"
        assert number_to_words(2.675) == "INR Two and Sixty Eight Paise Only"
        assert number_to_words(2.675) == number_to_words(Decimal("2.675"))

    def test_paise_never_carry_into_rupees(self):
        assert number_to_words(Decimal("100.999")) == "INR One Hundred and One Hundred Paise Only"

    def test_zero_rupees_leaves_empty_phrase(self):
        assert number_to_words(Decimal("0.01")) == "INR  and One Paise Only"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            number_to_words(Decimal("-1"))
        with pytest.raises(ValueError, match="negative"):
            number_to_words(-0.5)


class TestRupeesToWords:
    """Purchase orders spell the total rounded to whole rupees."""

    def test_rounds_half_up(self):
        assert rupees_to_words(Decimal("1180.59")) == (
            "INR One Thousand One Hundred Eighty One Only"
        )
        assert rupees_to_words(Decimal("2.50")) == "INR Three Only"
        assert rupees_to_words(Decimal("2.49")) == "INR Two Only"

    def test_small_total_rounds_to_zero(self):
        assert rupees_to_words(Decimal("0.40")) == "Zero"
