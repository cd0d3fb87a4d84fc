"""Detention charges: hourly billing of equipment dwell beyond free time."""

from decimal import Decimal
from typing import Iterable, NamedTuple

from src.models.schema import DetentionConfig
from src.models.utils import ZERO

MINUTES_PER_HOUR = 60


class DetentionResult(NamedTuple):
    """Charge for one detention segment.

    Attributes:
        charge: Unrounded charge, capped at the daily maximum
        billable_minutes: Minutes beyond free time plus grace
    """
    charge: Decimal
    billable_minutes: int


def calculate_detention(
    actual_minutes: int,
    free_minutes_override: int,
    config: DetentionConfig,
) -> DetentionResult:
    """Detention charge for a single day segment.

    Free time is ``free_minutes_override`` when nonzero, otherwise the
    configured free time; the grace period is added on top. Minutes past that
    window are billed proportionally (no rounding up to whole hours) and the
    result is capped at ``max_daily_charge``. The cap covers the whole call, so
    multi-day dwell must be split into one call per day.
    """
    free_minutes = free_minutes_override or config.free_time_minutes
    free_window = free_minutes + config.grace_period_minutes

    if actual_minutes <= free_window:
        return DetentionResult(ZERO, 0)

    billable_minutes = actual_minutes - free_window
    # multiply before dividing so 65 min @ 75/h is exactly 81.25
    charge = billable_minutes * config.rate_per_hour / MINUTES_PER_HOUR
    charge = min(charge, config.max_daily_charge)

    return DetentionResult(charge, billable_minutes)


def calculate_multi_day_detention(
    segments: Iterable[int],
    free_minutes_override: int,
    config: DetentionConfig,
) -> DetentionResult:
    """Sum detention over per-day dwell segments, capping each day separately."""
    total_charge = ZERO
    total_minutes = 0
    for minutes in segments:
        result = calculate_detention(minutes, free_minutes_override, config)
        total_charge += result.charge
        total_minutes += result.billable_minutes
    return DetentionResult(total_charge, total_minutes)
