"""Unit tests for the recurrence rule model and settings parsing."""

from datetime import datetime
import json

import pytest
from pydantic import ValidationError

from familytodo.models.task import Task
from familytodo.recurrence.rule import (
    AnchorMode,
    BusinessDaySchedule,
    IntervalSchedule,
    LegacyPattern,
    RecurrenceRuleError,
    RecurrenceUnit,
    WeekdaySetSchedule,
    build_schedule,
    rule_columns,
    rule_from_task,
    series_state_from_task,
)
from familytodo.schemas.recurrence import RecurrenceSettings, parse_recurrence_settings


class TestParseRecurrenceSettings:
    """Tests for parse_recurrence_settings."""

    def test_none_and_type_none_switch_recurrence_off(self) -> None:
        assert parse_recurrence_settings(None) is None
        assert parse_recurrence_settings({"type": "none"}) is None
        assert parse_recurrence_settings({"type": "none", "unit": "day"}) is None

    def test_client_keys_are_accepted(self) -> None:
        rule = parse_recurrence_settings(
            {
                "unit": "day",
                "interval": 3,
                "from": "completion",
                "endDate": "2024-12-31T00:00:00",
                "endCount": 10,
                "copyAttachments": True,
            }
        )

        assert rule.schedule == IntervalSchedule(unit=RecurrenceUnit.DAY, interval=3)
        assert rule.anchor is AnchorMode.COMPLETION
        assert rule.end_date == datetime(2024, 12, 31)
        assert rule.end_count == 10
        assert rule.copy_attachments is True
        assert rule.legacy_pattern is None

    def test_snake_case_names_are_accepted(self) -> None:
        settings = RecurrenceSettings(unit="week", anchor="due_date", end_count=2)

        rule = parse_recurrence_settings(settings)

        assert rule.end_count == 2
        assert rule.legacy_pattern is LegacyPattern.WEEKLY

    @pytest.mark.parametrize(
        ("unit", "expected"),
        [
            ("day", LegacyPattern.DAILY),
            ("week", LegacyPattern.WEEKLY),
            ("month", LegacyPattern.MONTHLY),
            ("year", None),
            ("weekday", None),
        ],
    )
    def test_legacy_alias_for_simple_rules(self, unit: str, expected: LegacyPattern | None) -> None:
        assert parse_recurrence_settings({"unit": unit}).legacy_pattern is expected

    def test_no_legacy_alias_with_interval_or_days(self) -> None:
        assert parse_recurrence_settings({"unit": "day", "interval": 2}).legacy_pattern is None
        assert parse_recurrence_settings({"unit": "week", "days": ["monday"]}).legacy_pattern is None

    def test_days_build_weekday_set(self) -> None:
        rule = parse_recurrence_settings({"unit": "week", "days": ["Friday", "monday", "friday"]})

        assert rule.schedule == WeekdaySetSchedule(days=frozenset({0, 4}))
        assert rule.day_names == ["monday", "friday"]

    def test_weekday_unit_builds_business_days(self) -> None:
        rule = parse_recurrence_settings({"unit": "weekday", "interval": 2})

        assert isinstance(rule.schedule, BusinessDaySchedule)
        assert rule.interval == 2
        assert rule.unit is RecurrenceUnit.WEEKDAY

    @pytest.mark.parametrize(
        "settings",
        [
            {"unit": "fortnight"},
            {"unit": "day", "interval": 0},
            {"unit": "day", "interval": -1},
            {"unit": "day", "days": ["monday"]},
            {"unit": "week", "days": ["funday"]},
            {"unit": "day", "endCount": 0},
            {"interval": 2},
            {"unit": "day", "from": "tomorrow"},
        ],
    )
    def test_malformed_settings_are_rejected(self, settings: dict) -> None:
        with pytest.raises(ValidationError):
            parse_recurrence_settings(settings)


class TestBuildSchedule:
    """Tests for build_schedule."""

    def test_non_positive_interval(self) -> None:
        with pytest.raises(RecurrenceRuleError):
            build_schedule(RecurrenceUnit.DAY, 0, None)

    def test_days_only_with_week(self) -> None:
        with pytest.raises(RecurrenceRuleError):
            build_schedule(RecurrenceUnit.MONTH, 1, ["monday"])


class TestRuleFromTask:
    """Tests for reading and writing the persisted rule."""

    def test_plain_task_does_not_repeat(self) -> None:
        assert rule_from_task(Task(title="Once")) is None

    def test_legacy_pattern_row(self) -> None:
        task = Task(title="Trash", recurring_pattern="weekly")

        rule = rule_from_task(task)

        assert rule.legacy_only is True
        assert rule.unit is None
        assert rule.schedule == IntervalSchedule(unit=RecurrenceUnit.WEEK, interval=1)
        assert rule.anchor is AnchorMode.DUE_DATE

    def test_modern_row(self) -> None:
        task = Task(
            title="Water plants",
            recurring_unit="week",
            recurring_interval=1,
            recurring_days=json.dumps(["tuesday", "saturday"]),
            recurring_from="completion",
            recurring_end_count=5,
            recurring_copy_attachments=True,
        )

        rule = rule_from_task(task)

        assert rule.schedule == WeekdaySetSchedule(days=frozenset({1, 5}))
        assert rule.anchor is AnchorMode.COMPLETION
        assert rule.end_count == 5
        assert rule.copy_attachments is True

    @pytest.mark.parametrize(
        "columns",
        [
            {"recurring_unit": "hour"},
            {"recurring_pattern": "hourly"},
            {"recurring_unit": "day", "recurring_from": "nowhere"},
            {"recurring_unit": "week", "recurring_days": "not json"},
            {"recurring_unit": "week", "recurring_days": '"monday"'},
        ],
    )
    def test_unreadable_rows_raise(self, columns: dict) -> None:
        with pytest.raises(RecurrenceRuleError):
            rule_from_task(Task(title="Broken", **columns))

    def test_columns_round_trip_through_row(self) -> None:
        rule = parse_recurrence_settings(
            {"unit": "week", "days": ["sunday"], "endDate": "2025-01-01T00:00:00", "from": "completion"}
        )

        task = Task(title="Clean", **rule_columns(rule))

        assert task.recurring_days == '["sunday"]'
        assert task.recurring_unit == "week"
        assert rule_from_task(task) == rule

    def test_legacy_columns_stay_legacy(self) -> None:
        rule = rule_from_task(Task(title="Bills", recurring_pattern="monthly"))

        columns = rule_columns(rule)

        assert columns["recurring_pattern"] == "monthly"
        assert columns["recurring_unit"] is None
        assert columns["recurring_interval"] is None
        assert columns["recurring_from"] is None

    def test_empty_columns_for_no_rule(self) -> None:
        columns = rule_columns(None)

        assert all(value in (None, False) for value in columns.values())

    def test_series_state_defaults(self) -> None:
        state = series_state_from_task(Task(title="New"))

        assert state.occurrence_number == 1
        assert state.group_id is None
        assert state.parent_task_id is None
