"""Utilities for formatting task information."""

from familytodo.recurrence.rule import (
    AnchorMode,
    BusinessDaySchedule,
    IntervalSchedule,
    RecurrenceRule,
    SeriesState,
    WeekdaySetSchedule,
)


def format_date_short(value) -> str:
    """Format a date as e.g. 'Mar 5, 2024'."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def summarize(rule: RecurrenceRule | None, state: SeriesState | None = None) -> str | None:
    """Describe a recurrence rule in one line, e.g. 'Every 2 weeks until Mar 5, 2024'.

    Returns None for tasks that do not repeat.
    """
    if rule is None:
        return None
    if rule.legacy_only and rule.legacy_pattern is not None:
        return rule.legacy_pattern.value

    schedule = rule.schedule
    if isinstance(schedule, BusinessDaySchedule):
        summary = "Every weekday"
    elif isinstance(schedule, WeekdaySetSchedule):
        summary = f"Every {', '.join(rule.day_names)}"
    elif isinstance(schedule, IntervalSchedule) and schedule.interval == 1:
        summary = f"Every {schedule.unit.value}"
    else:
        summary = f"Every {schedule.interval} {schedule.unit.value}s"

    if rule.anchor is AnchorMode.COMPLETION:
        summary += " (from completion)"

    if rule.end_date is not None:
        summary += f" until {format_date_short(rule.end_date)}"
    elif rule.end_count is not None:
        occurrence = state.occurrence_number if state is not None else 1
        summary += f" ({occurrence}/{rule.end_count})"

    return summary
