"""Utilities for recurrence calculation logic."""

from calendar import monthrange
from datetime import datetime, timedelta

from familytodo.recurrence.rule import (
    AnchorMode,
    BusinessDaySchedule,
    IntervalSchedule,
    RecurrenceRule,
    RecurrenceUnit,
    SeriesState,
    WeekdaySetSchedule,
)
from familytodo.services.time_manager import to_naive_utc

# Saturday and Sunday in date.weekday() numbering
WEEKEND_DAYS = frozenset({5, 6})


def add_months(dt: datetime, months: int) -> datetime:
    """Move ``dt`` forward by calendar months, keeping the day of month.

    If the target month is shorter than the original day (Jan 31 -> Feb), the
    result is the last day of the target month, never a day of the month after.

    Args:
        dt: Base date and time.
        months: Number of months to add.

    Returns:
        datetime with the same time of day and tzinfo as ``dt``.
    """
    month_index = dt.month - 1 + months
    target_year = dt.year + month_index // 12
    target_month = month_index % 12 + 1
    last_day = monthrange(target_year, target_month)[1]
    return dt.replace(year=target_year, month=target_month, day=min(dt.day, last_day))


def add_years(dt: datetime, years: int) -> datetime:
    """Move ``dt`` forward by whole years; Feb 29 becomes Feb 28 in common years."""
    target_year = dt.year + years
    last_day = monthrange(target_year, dt.month)[1]
    return dt.replace(year=target_year, day=min(dt.day, last_day))


def next_matching_weekday(base: datetime, days: frozenset[int]) -> datetime:
    """Return the first day strictly after ``base`` whose weekday is in ``days``."""
    if not days:
        raise ValueError("At least one weekday is required")
    candidate = base + timedelta(days=1)
    while candidate.weekday() not in days:
        candidate += timedelta(days=1)
    return candidate


def next_business_day(base: datetime) -> datetime:
    """Return the first Monday-to-Friday day strictly after ``base``."""
    candidate = base + timedelta(days=1)
    while candidate.weekday() in WEEKEND_DAYS:
        candidate += timedelta(days=1)
    return candidate


def next_occurrence(
    rule: RecurrenceRule | None,
    current_due_date: datetime | None,
    completion_time: datetime | None,
) -> datetime | None:
    """Calculate the next occurrence of a series.

    Args:
        rule: Rule of the current task; None means the task does not repeat.
        current_due_date: Due date of the task being completed or removed.
        completion_time: Moment of completion, used when the rule is anchored
            to completion.

    Returns:
        The next due date, or None when there is none (non-recurring rule or
        missing anchor date). Time of day and tzinfo of the anchor are kept.
    """
    if rule is None:
        return None

    base = completion_time if rule.anchor is AnchorMode.COMPLETION else current_due_date
    if base is None:
        return None

    schedule = rule.schedule
    if isinstance(schedule, WeekdaySetSchedule):
        return next_matching_weekday(base, schedule.days)
    if isinstance(schedule, BusinessDaySchedule):
        # TODO: interval is ignored for weekday rules; confirm with product whether
        # "every N weekdays" should be supported before generalizing.
        return next_business_day(base)
    if isinstance(schedule, IntervalSchedule):
        if schedule.unit is RecurrenceUnit.DAY:
            return base + timedelta(days=schedule.interval)
        if schedule.unit is RecurrenceUnit.WEEK:
            return base + timedelta(days=7 * schedule.interval)
        if schedule.unit is RecurrenceUnit.MONTH:
            return add_months(base, schedule.interval)
        if schedule.unit is RecurrenceUnit.YEAR:
            return add_years(base, schedule.interval)
    return None


def _comparable(a: datetime, b: datetime) -> tuple[datetime, datetime]:
    """Bring both values to naive UTC when only one of them is timezone-aware."""
    if (a.tzinfo is None) != (b.tzinfo is None):
        return to_naive_utc(a), to_naive_utc(b)
    return a, b


def has_ended(rule: RecurrenceRule | None, state: SeriesState, now: datetime) -> bool:
    """Check whether the series stops at the current task.

    End date and end count are independent; either one stops the series. The
    count is compared with the current task's occurrence number, so a series
    with ``end_count = 3`` produces occurrences 1, 2 and 3.
    """
    if rule is None:
        return False
    if rule.end_date is not None:
        current, end_date = _comparable(now, rule.end_date)
        if current >= end_date:
            return True
    if rule.end_count is not None and state.occurrence_number >= rule.end_count:
        return True
    return False
