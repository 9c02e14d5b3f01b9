"""Decimal helpers for currency.

Binary floats never touch money: every amount entering the calculators is
converted with ``to_decimal`` and rounded with ``quantize_money``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Decimal | int | str | None) -> Decimal | None:
    """Convert a stored or requested value to Decimal.

    Floats are rejected; they must be parsed from their string form by the
    caller so no representation error sneaks in.
    """
    if value is None:
        return None
    if isinstance(value, float):
        raise TypeError("float values are not accepted for money; pass a str or Decimal")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"not a decimal value: {value!r}")


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_set(value: Decimal | None) -> bool:
    """True when a money term is present and non-zero."""
    return value is not None and value != 0


def fits_scale(value: Decimal, places: int) -> bool:
    """True when value has no significant digits past the given decimal places."""
    return value == value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Render an amount as a two-decimal string."""
    return str(quantize_money(value))
