"""Day-indexed tiered pricing used by per-diem, demurrage and similar schedules."""

from decimal import Decimal
from typing import List, Optional, Sequence

from src.config.messages import (
    ERROR_SCHEDULE_BAD_RANGE,
    ERROR_SCHEDULE_EMPTY,
    ERROR_SCHEDULE_FREE_DAYS,
    ERROR_SCHEDULE_NOT_CONTIGUOUS,
    ERROR_SCHEDULE_UNBOUNDED_NOT_LAST,
)
from src.core.exceptions import ConfigurationError
from src.models.schema import BusinessRules, TierRate
from src.models.utils import ZERO


def tiered_charge(days: int, schedule: Sequence[TierRate]) -> Decimal:
    """Charge for ``days`` elapsed days under a marginal tier schedule.

    Each day is billed at the rate of the tier that contains it, so 25 days on
    ``[6-10 @25, 11-20 @35, 21+ @50]`` is 5*25 + 10*35 + 5*50. Days before the
    first tier's ``from_day`` are free.

    Args:
        days: Total days elapsed
        schedule: Contiguous tiers ordered by ``from_day``

    Returns:
        Unrounded charge; callers round when the amount becomes a line item.
    """
    if days <= 0:
        return ZERO

    total = ZERO
    for tier in schedule:
        if days < tier.from_day:
            break

        end_day = days if tier.to_day == 0 or tier.to_day > days else tier.to_day
        days_in_tier = end_day - tier.from_day + 1
        if days_in_tier > 0:
            total += days_in_tier * tier.rate_per_day

        if tier.to_day != 0 and days <= tier.to_day:
            break

    return total


def validate_tier_schedule(
    schedule: Sequence[TierRate],
    name: str = "schedule",
    free_days: Optional[int] = None,
) -> None:
    """Check that a schedule is well formed.

    Tiers must be non-empty, ordered, contiguous (each tier starts the day
    after the previous one ends) and only the last may be unbounded. When
    ``free_days`` is given the first tier must start on ``free_days + 1``.

    Raises:
        ConfigurationError: On the first problem found
    """
    if not schedule:
        raise ConfigurationError(ERROR_SCHEDULE_EMPTY.format(name=name), {"schedule": name})

    last_index = len(schedule) - 1
    for index, tier in enumerate(schedule):
        details = {"schedule": name, "tier": index}
        if tier.to_day != 0 and tier.to_day < tier.from_day:
            raise ConfigurationError(
                ERROR_SCHEDULE_BAD_RANGE.format(
                    name=name, index=index, from_day=tier.from_day, to_day=tier.to_day
                ),
                details,
            )
        if tier.to_day == 0 and index != last_index:
            raise ConfigurationError(
                ERROR_SCHEDULE_UNBOUNDED_NOT_LAST.format(name=name, index=index),
                details,
            )
        if index > 0:
            expected = schedule[index - 1].to_day + 1
            if tier.from_day != expected:
                raise ConfigurationError(
                    ERROR_SCHEDULE_NOT_CONTIGUOUS.format(
                        name=name, index=index, from_day=tier.from_day, expected=expected
                    ),
                    details,
                )

    if free_days is not None and schedule[0].from_day != free_days + 1:
        raise ConfigurationError(
            ERROR_SCHEDULE_FREE_DAYS.format(
                name=name,
                from_day=schedule[0].from_day,
                free_days=free_days,
                expected=free_days + 1,
            ),
            {"schedule": name, "free_days": free_days},
        )


def validate_business_rules(rules: BusinessRules) -> None:
    """Validate every tier schedule in a rule set (fail fast at load time)."""
    for size, schedule in rules.per_diem.rates.items():
        validate_tier_schedule(
            schedule, name=f"per_diem[{size.value}]", free_days=rules.per_diem.free_days
        )
    for size, schedule in rules.demurrage.rates.items():
        validate_tier_schedule(
            schedule, name=f"demurrage[{size.value}]", free_days=rules.demurrage.free_days
        )


def shift_schedule(schedule: Sequence[TierRate], free_days: int) -> List[TierRate]:
    """Move a schedule so that its first tier starts on ``free_days + 1``.

    Tier widths and rates are kept; the unbounded last tier stays unbounded.
    Used when free days are overridden without supplying a new table.
    """
    if not schedule:
        return []
    offset = free_days + 1 - schedule[0].from_day
    return [
        TierRate(
            from_day=tier.from_day + offset,
            to_day=0 if tier.to_day == 0 else tier.to_day + offset,
            rate_per_day=tier.rate_per_day,
        )
        for tier in schedule
    ]
