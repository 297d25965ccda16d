"""
Money helpers.

Money is a Decimal with exactly two places. The database stores
integer cents so sums are exact; these helpers convert between
the two. Amounts are never rounded: a value with sub-cent
precision is a validation error.
"""

from decimal import Decimal, InvalidOperation

from double_entry.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Convert an int, str, float or Decimal into a two-place Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() first so 0.1 stays 0.1 instead of its binary expansion
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"'{value}' is not a valid amount")

    if not amount.is_finite():
        raise ValidationError(f"'{value}' is not a valid amount")
    if amount != amount.quantize(CENT):
        raise ValidationError(
            f"Amount {value} has more precision than one cent"
        )
    return amount.quantize(CENT)


def to_cents(value) -> int:
    return int(to_money(value) * 100)


def from_cents(cents: int | None) -> Decimal:
    if cents is None:
        return ZERO
    return (Decimal(cents) / 100).quantize(CENT)
