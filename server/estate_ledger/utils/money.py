from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
MINOR_UNITS_PER_MAJOR = 100


def quantize_money(value: Decimal | float | int | str | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_minor_units(value: Decimal | float | int | str) -> int:
    """Convert a display amount (e.g. ``"500.00"``) to integer minor units."""
    return int(quantize_money(value) * MINOR_UNITS_PER_MAJOR)


def from_minor_units(amount: int | None) -> Decimal:
    return (Decimal(amount or 0) / MINOR_UNITS_PER_MAJOR).quantize(CENTS)
