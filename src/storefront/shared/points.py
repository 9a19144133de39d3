"""Point and currency arithmetic.

Amounts are rounded half-up to whole units, the way customers expect
(2.5 → 3), not with Python's banker's rounding.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(amount) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(amount, percent) -> int:
    """``percent`` % of ``amount``, rounded to whole units."""
    return round_half_up(Decimal(str(amount)) * Decimal(str(percent)) / Decimal("100"))
