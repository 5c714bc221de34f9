"""Recurring-task rule model."""

from familytodo.recurrence.rule import (
    AnchorMode,
    BusinessDaySchedule,
    IntervalSchedule,
    LegacyPattern,
    RecurrenceRule,
    RecurrenceRuleError,
    RecurrenceUnit,
    SeriesState,
    WeekdaySetSchedule,
)

__all__ = [
    "AnchorMode",
    "BusinessDaySchedule",
    "IntervalSchedule",
    "LegacyPattern",
    "RecurrenceRule",
    "RecurrenceRuleError",
    "RecurrenceUnit",
    "SeriesState",
    "WeekdaySetSchedule",
]
