"""Expansion of assessment recurrences into occurrence dates."""

import calendar
from datetime import date, timedelta

from rentledger.models.assessment import Frequency
from rentledger.services.errors import UnsupportedRecurrenceError

# Month step for each month-based recurrence
_MONTH_STEPS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}

# Day step for each day-based recurrence
_DAY_STEPS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
}


def add_months(anchor: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the target month.

    Examples:
        >>> add_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
        >>> add_months(date(2024, 11, 15), 3)
        datetime.date(2025, 2, 15)
    """
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def occurrences_in_range(
    start: date,
    stop: date,
    recurrence: Frequency,
    range_start: date,
    range_stop: date,
) -> list[date]:
    """
    List the dates an assessment falls due within a billing range.

    Occurrences step from the assessment's start date and are limited to
    start <= d <= stop and range_start <= d < range_stop. Month-based steps
    are computed from the start date, so Jan 31 monthly gives Feb 29, Mar 31.

    Args:
        start: First date of the assessment
        stop: Last date of the assessment (inclusive)
        recurrence: Recurrence cycle
        range_start: Start of the billing range (inclusive)
        range_stop: End of the billing range (exclusive)

    Returns:
        Occurrence dates in ascending order

    Raises:
        UnsupportedRecurrenceError: For secondly, minutely and hourly recurrences
    """
    if recurrence.is_sub_daily:
        raise UnsupportedRecurrenceError(f"Recurrence '{recurrence.value}' is not supported for journaling")

    last = min(stop, range_stop - timedelta(days=1))

    if recurrence == Frequency.ONE_TIME:
        return [start] if range_start <= start <= last else []

    dates = []
    if recurrence in _DAY_STEPS:
        step = _DAY_STEPS[recurrence]
        current = start
        if current < range_start:
            # jump to the first step on or after range_start
            skipped = (range_start - start).days // step
            current = start + timedelta(days=skipped * step)
            if current < range_start:
                current += timedelta(days=step)
        while current <= last:
            dates.append(current)
            current += timedelta(days=step)
        return dates

    step = _MONTH_STEPS[recurrence]
    n = 0
    current = start
    while current <= last:
        if current >= range_start:
            dates.append(current)
        n += 1
        current = add_months(start, n * step)
    return dates


__all__ = ["add_months", "occurrences_in_range"]
