"""Money and calendar helpers shared by the calculators and the ledger."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artifacts.

    Floats are routed through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than ``Decimal("0.1000000000000000055511151231257827...")``.

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal representation of the value
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Number) -> Decimal:
    """Round a monetary amount to cents using ROUND_HALF_UP."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Number]) -> Decimal:
    """Sum monetary values exactly (no intermediate rounding)."""
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return total


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end``; never negative."""
    return max((end - start).days, 0)


def days_past_last_free_day(last_free_day: date, as_of: date) -> int:
    """Days of demurrage exposure: days elapsed after the last free day.

    A container picked up on its last free day incurs zero days; one picked up
    the day after incurs one day.
    """
    return days_between(last_free_day, as_of)
