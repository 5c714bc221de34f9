"""Recurrence rule model.

A rule is validated once, where it enters the system (client settings or a
persisted task row), and from then on is passed around as an immutable
``RecurrenceRule`` whose ``schedule`` is exactly one of the variants below.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import json
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from familytodo.models.task import Task


class RecurrenceRuleError(ValueError):
    """Raised when a stored or submitted rule cannot be interpreted."""


class RecurrenceUnit(str, Enum):
    """Step unit of a rule."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    WEEKDAY = "weekday"  # Monday to Friday


class AnchorMode(str, Enum):
    """Which date the next occurrence is computed from."""

    DUE_DATE = "due_date"
    COMPLETION = "completion"


class LegacyPattern(str, Enum):
    """Rule format used before units and intervals existed."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


LEGACY_EQUIVALENTS: dict[LegacyPattern, RecurrenceUnit] = {
    LegacyPattern.DAILY: RecurrenceUnit.DAY,
    LegacyPattern.WEEKLY: RecurrenceUnit.WEEK,
    LegacyPattern.MONTHLY: RecurrenceUnit.MONTH,
}

# Same numbering as date.weekday()
WEEKDAY_NAMES: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def weekday_number(name: str) -> int:
    """Translate a weekday name (any case) into ``date.weekday()`` numbering."""
    try:
        return WEEKDAY_NAMES[name.strip().lower()]
    except (KeyError, AttributeError) as exc:
        raise RecurrenceRuleError(f"Unknown weekday name: {name!r}") from exc


@dataclass(frozen=True, slots=True)
class IntervalSchedule:
    """Every ``interval`` days, weeks, months or years."""

    unit: RecurrenceUnit
    interval: int = 1


@dataclass(frozen=True, slots=True)
class WeekdaySetSchedule:
    """On specific weekdays; the interval is not used."""

    days: frozenset[int]


@dataclass(frozen=True, slots=True)
class BusinessDaySchedule:
    """On the next Monday-to-Friday day; the interval is not used."""


Schedule = Union[IntervalSchedule, WeekdaySetSchedule, BusinessDaySchedule]


@dataclass(frozen=True, slots=True)
class RecurrenceRule:
    """Canonical description of how a task repeats."""

    schedule: Schedule
    anchor: AnchorMode = AnchorMode.DUE_DATE
    end_date: datetime | None = None
    end_count: int | None = None
    legacy_pattern: LegacyPattern | None = None
    copy_attachments: bool = False
    # Interval exactly as configured, kept for rules whose schedule ignores it
    interval: int = 1
    # Stored only as a legacy pattern, without a modern unit
    legacy_only: bool = False

    @property
    def unit(self) -> RecurrenceUnit | None:
        """The modern unit, or None for a rule stored only as a legacy pattern."""
        if self.legacy_only:
            return None
        if isinstance(self.schedule, BusinessDaySchedule):
            return RecurrenceUnit.WEEKDAY
        if isinstance(self.schedule, WeekdaySetSchedule):
            return RecurrenceUnit.WEEK
        return self.schedule.unit

    @property
    def day_names(self) -> list[str]:
        """Selected weekday names in calendar order, empty unless a weekday set."""
        if not isinstance(self.schedule, WeekdaySetSchedule):
            return []
        by_number = {number: name for name, number in WEEKDAY_NAMES.items()}
        return [by_number[number] for number in sorted(self.schedule.days)]


@dataclass(frozen=True, slots=True)
class SeriesState:
    """Bookkeeping carried on every task of a series."""

    occurrence_number: int = 1
    group_id: str | None = None
    parent_task_id: int | None = None


def build_schedule(unit: RecurrenceUnit, interval: int, days: list[str] | None) -> Schedule:
    """Pick the schedule variant for a unit/interval/days combination."""
    if interval < 1:
        raise RecurrenceRuleError(f"Interval must be a positive integer, got {interval}")
    if days:
        if unit is not RecurrenceUnit.WEEK:
            raise RecurrenceRuleError("Specific days are only allowed with the 'week' unit")
        return WeekdaySetSchedule(days=frozenset(weekday_number(day) for day in days))
    if unit is RecurrenceUnit.WEEKDAY:
        return BusinessDaySchedule()
    return IntervalSchedule(unit=unit, interval=interval)


def _parse_days(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    try:
        days = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RecurrenceRuleError(f"Stored weekday list is not valid JSON: {raw!r}") from exc
    if not isinstance(days, list):
        raise RecurrenceRuleError(f"Stored weekday list is not a list: {raw!r}")
    return days


def rule_from_task(task: "Task") -> RecurrenceRule | None:
    """Read the persisted rule of a task row, or None if the task does not repeat."""
    if not task.recurring_unit and not task.recurring_pattern:
        return None

    legacy: LegacyPattern | None = None
    if task.recurring_pattern:
        try:
            legacy = LegacyPattern(task.recurring_pattern)
        except ValueError as exc:
            raise RecurrenceRuleError(f"Unknown legacy pattern: {task.recurring_pattern!r}") from exc

    common: dict[str, Any] = {
        "end_date": task.recurring_end_date,
        "end_count": task.recurring_end_count,
        "legacy_pattern": legacy,
        "copy_attachments": bool(task.recurring_copy_attachments),
    }

    if not task.recurring_unit:
        # Legacy rows always step once from the due date
        return RecurrenceRule(
            schedule=IntervalSchedule(unit=LEGACY_EQUIVALENTS[legacy], interval=1),
            anchor=AnchorMode.DUE_DATE,
            legacy_only=True,
            **common,
        )

    try:
        unit = RecurrenceUnit(task.recurring_unit)
    except ValueError as exc:
        raise RecurrenceRuleError(f"Unknown recurrence unit: {task.recurring_unit!r}") from exc
    try:
        anchor = AnchorMode(task.recurring_from or AnchorMode.DUE_DATE.value)
    except ValueError as exc:
        raise RecurrenceRuleError(f"Unknown anchor mode: {task.recurring_from!r}") from exc

    interval = task.recurring_interval or 1
    return RecurrenceRule(
        schedule=build_schedule(unit, interval, _parse_days(task.recurring_days)),
        anchor=anchor,
        interval=interval,
        **common,
    )


def series_state_from_task(task: "Task") -> SeriesState:
    """Read series bookkeeping from a task row."""
    return SeriesState(
        occurrence_number=task.recurring_occurrence or 1,
        group_id=task.recurring_group_id,
        parent_task_id=task.parent_task_id,
    )


RECURRENCE_COLUMNS = (
    "recurring_pattern",
    "recurring_interval",
    "recurring_unit",
    "recurring_days",
    "recurring_from",
    "recurring_end_date",
    "recurring_end_count",
    "recurring_copy_attachments",
)


def stored_rule_columns(task: "Task") -> dict[str, Any]:
    """The ``recurring_*`` values of a row exactly as stored, for carrying a rule over."""
    return {name: getattr(task, name) for name in RECURRENCE_COLUMNS}


def rule_columns(rule: RecurrenceRule | None) -> dict[str, Any]:
    """Column values that persist ``rule`` on a task row (all empty for None)."""
    if rule is None:
        columns = dict.fromkeys(RECURRENCE_COLUMNS)
        columns["recurring_copy_attachments"] = False
        return columns
    days = rule.day_names
    return {
        "recurring_pattern": rule.legacy_pattern.value if rule.legacy_pattern else None,
        "recurring_interval": None if rule.legacy_only else rule.interval,
        "recurring_unit": rule.unit.value if rule.unit else None,
        "recurring_days": json.dumps(days) if days else None,
        "recurring_from": None if rule.legacy_only else rule.anchor.value,
        "recurring_end_date": rule.end_date,
        "recurring_end_count": rule.end_count,
        "recurring_copy_attachments": rule.copy_attachments,
    }


__all__ = [
    "AnchorMode",
    "BusinessDaySchedule",
    "IntervalSchedule",
    "LEGACY_EQUIVALENTS",
    "LegacyPattern",
    "RECURRENCE_COLUMNS",
    "RecurrenceRule",
    "RecurrenceRuleError",
    "RecurrenceUnit",
    "Schedule",
    "SeriesState",
    "WEEKDAY_NAMES",
    "WeekdaySetSchedule",
    "build_schedule",
    "rule_columns",
    "rule_from_task",
    "series_state_from_task",
    "stored_rule_columns",
    "weekday_number",
]
