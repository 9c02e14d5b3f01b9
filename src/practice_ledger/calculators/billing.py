"""Billing entry pricing."""

from __future__ import annotations

from decimal import Decimal

from practice_ledger.calculators.money import fits_scale, is_set, quantize_money
from practice_ledger.calculators.types import EntryType, MatterTerms, PricedEntry
from practice_ledger.errors import ValidationError

DEFAULT_QUANTITY = Decimal("1")

# Scales of the stored quantity and rate columns
QUANTITY_PLACES = 4
RATE_PLACES = 2


def price_entry(
    terms: MatterTerms,
    entry_type: EntryType | str,
    quantity: Decimal | None,
    rate: Decimal | None,
) -> PricedEntry:
    """Compute the amount for one billing entry.

    Pricing rules:
    - time: quantity * effective rate, where the matter's hourly rate wins
      over the caller's rate when it is set and non-zero
    - expense: the caller's rate is the amount; quantity is ignored
    - flat_fee: the matter's flat fee wins over the caller's rate when it
      is set and non-zero

    Args:
        terms: Billing terms of the owning matter
        entry_type: Kind of entry
        quantity: Hours or unit count (required for time entries), at most
            four decimal places
        rate: Caller-supplied rate, used only as a fallback for time and
            flat-fee entries, at most two decimal places

    Returns:
        PricedEntry with the rate actually applied and the amount in cents

    Raises:
        ValidationError: On negative or over-precise values, unknown entry
            type, or when no price can be determined
    """
    try:
        kind = EntryType(entry_type)
    except ValueError:
        raise ValidationError(
            f"entry_type must be one of {[e.value for e in EntryType]}, got {entry_type!r}",
            field="entry_type",
        )

    if quantity is not None:
        if quantity < 0:
            raise ValidationError("quantity cannot be negative", field="quantity")
        if not fits_scale(quantity, QUANTITY_PLACES):
            raise ValidationError(
                f"quantity allows at most {QUANTITY_PLACES} decimal places, got {quantity}",
                field="quantity",
            )
    if rate is not None:
        if rate < 0:
            raise ValidationError("rate cannot be negative", field="rate")
        if not fits_scale(rate, RATE_PLACES):
            raise ValidationError(
                f"rate allows at most {RATE_PLACES} decimal places, got {rate}",
                field="rate",
            )

    if kind == EntryType.TIME:
        if quantity is None:
            raise ValidationError("time entries require a quantity", field="quantity")
        effective_rate = terms.hourly_rate if is_set(terms.hourly_rate) else rate
        if effective_rate is None:
            raise ValidationError(
                "matter has no hourly rate and no rate was supplied", field="rate"
            )
        return PricedEntry(
            entry_type=kind,
            quantity=quantity,
            rate=effective_rate,
            amount=quantize_money(quantity * effective_rate),
        )

    if kind == EntryType.EXPENSE:
        if rate is None:
            raise ValidationError("expense entries require a rate", field="rate")
        return PricedEntry(
            entry_type=kind,
            quantity=quantity if quantity is not None else DEFAULT_QUANTITY,
            rate=rate,
            amount=quantize_money(rate),
        )

    # Flat fee
    fee = terms.flat_fee_amount if is_set(terms.flat_fee_amount) else rate
    if fee is None:
        raise ValidationError(
            "matter has no flat fee and no rate was supplied", field="rate"
        )
    return PricedEntry(
        entry_type=kind,
        quantity=quantity if quantity is not None else DEFAULT_QUANTITY,
        rate=fee,
        amount=quantize_money(fee),
    )
