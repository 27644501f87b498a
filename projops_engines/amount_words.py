"""
Amount-in-words rendering on the Indian numbering scale.

Purchase orders carry the total spelled out ("INR Fifteen Lakh Seventy
Five Thousand Only").  The scale is hundred, thousand, lakh (10^5) and
crore (10^7); above a crore the quotient recurses, so 10^9 reads
"One Hundred Crore" and 10^12 "One Lakh Crore".

Two literal behaviours are part of the contract:

- paise are ``round_half_up(fraction * 100)`` and never carry into the
  rupee part, so 100.999 reads "INR One Hundred and One Hundred Paise Only";
- a zero rupee part renders as an empty phrase, so 0.01 reads
  "INR  and One Paise Only" (two spaces).

All arithmetic is Decimal.  A float argument is read through ``str()``,
so it is rounded as the literal the caller wrote rather than as its
binary approximation: 1.005 gives one paisa and 2.675 gives sixty eight,
where binary-float rounding would give zero and sixty seven.  Money
should arrive as Decimal anyway; the float path only keeps hand-typed
literals predictable.  Negative amounts are refused with ValueError
instead of being spelled.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

_ONES = (
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
)
_TENS = (
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty",
    "Ninety",
)

# (divisor, word), checked for n below the next boundary
_SCALES = (
    (1_000, "Thousand", 100_000),
    (100_000, "Lakh", 10_000_000),
)
_CRORE = 10_000_000


def _to_decimal(amount: Decimal | int | float | str) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        return Decimal(str(amount))
    return Decimal(amount)


def _words(n: int) -> str:
    if n < 20:
        return _ONES[n]
    if n < 100:
        tens, ones = divmod(n, 10)
        return _TENS[tens] + (" " + _ONES[ones] if ones else "")
    if n < 1000:
        hundreds, rest = divmod(n, 100)
        return _ONES[hundreds] + " Hundred" + (" " + _words(rest) if rest else "")
    for divisor, word, limit in _SCALES:
        if n < limit:
            break
    else:
        divisor, word = _CRORE, "Crore"
    quotient, rest = divmod(n, divisor)
    return _words(quotient) + " " + word + (" " + _words(rest) if rest else "")


def number_to_words(amount: Decimal | int | float | str) -> str:
    """
    Spell a non-negative amount as Indian rupees and paise.

    Zero is the bare word "Zero" with no currency prefix.

    Raises:
        ValueError: If amount is negative.
    """
    value = _to_decimal(amount)
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    if value == 0:
        return "Zero"

    whole = value.to_integral_value(rounding=ROUND_FLOOR)
    paise = int(((value - whole) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    result = "INR " + _words(int(whole))
    if paise > 0:
        result += " and " + _words(paise) + " Paise"
    return result + " Only"


def rupees_to_words(amount: Decimal | int | float | str) -> str:
    """Round half-up to whole rupees, then spell.  Used for the PO words field."""
    value = _to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return number_to_words(value)
