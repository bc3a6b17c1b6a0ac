from decimal import ROUND_HALF_UP, Decimal

_CENTS_PER_DOLLAR = Decimal(100)
_TWO_PLACES = Decimal("0.01")


def cents_to_dollars(amount_in_cents: int | Decimal | None) -> Decimal:
    if amount_in_cents is None:
        return Decimal(0)
    return Decimal(amount_in_cents) / _CENTS_PER_DOLLAR


def format_currency(amount_in_cents: int | Decimal | None) -> str:
    """Render an amount stored in cents as an en-US dollar string, e.g. ``$1,250.00``."""
    dollars = cents_to_dollars(amount_in_cents).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,.2f}"
