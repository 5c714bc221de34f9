"""Pydantic schemas for recurrence settings sent by the client."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from familytodo.recurrence.rule import (
    WEEKDAY_NAMES,
    AnchorMode,
    LegacyPattern,
    RecurrenceRule,
    RecurrenceRuleError,
    RecurrenceUnit,
    build_schedule,
)
from familytodo.services.time_manager import to_naive_utc


class RecurrenceSettings(BaseModel):
    """Recurrence configuration as edited in the task form.

    Accepts the client's camelCase keys (``from``, ``endDate``, ``endCount``,
    ``copyAttachments``) as well as the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["none", "custom"] = Field("custom", description="'none' switches recurrence off")
    unit: RecurrenceUnit | None = Field(None, description="Step unit")
    interval: int = Field(1, ge=1, description="Step count in units")
    days: list[str] | None = Field(None, description="Weekday names, only with unit 'week'")
    anchor: AnchorMode = Field(AnchorMode.DUE_DATE, alias="from")
    end_date: datetime | None = Field(None, alias="endDate")
    end_count: int | None = Field(None, ge=1, alias="endCount")
    copy_attachments: bool = Field(False, alias="copyAttachments")

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str] | None) -> list[str] | None:
        """Normalize weekday names and reject unknown ones."""
        if not value:
            return None
        normalized = []
        for day in value:
            name = day.strip().lower()
            if name not in WEEKDAY_NAMES:
                raise ValueError(f"Unknown weekday name: {day!r}")
            if name not in normalized:
                normalized.append(name)
        return normalized

    @field_validator("end_date")
    @classmethod
    def normalize_end_date(cls, value: datetime | None) -> datetime | None:
        """Store offsets as UTC."""
        return to_naive_utc(value)

    @model_validator(mode="after")
    def validate_combination(self) -> "RecurrenceSettings":
        """A recurring configuration needs a unit; days need the week unit."""
        if self.type == "none":
            return self
        if self.unit is None:
            raise ValueError("unit is required for a recurring task")
        if self.days and self.unit is not RecurrenceUnit.WEEK:
            raise ValueError("days can only be combined with unit 'week'")
        return self


def _legacy_alias(settings: RecurrenceSettings) -> LegacyPattern | None:
    """Legacy pattern equivalent to simple every-1-unit configurations."""
    if settings.interval != 1:
        return None
    if settings.unit is RecurrenceUnit.DAY:
        return LegacyPattern.DAILY
    if settings.unit is RecurrenceUnit.WEEK and not settings.days:
        return LegacyPattern.WEEKLY
    if settings.unit is RecurrenceUnit.MONTH:
        return LegacyPattern.MONTHLY
    return None


def parse_recurrence_settings(
    settings: RecurrenceSettings | dict[str, Any] | None,
) -> RecurrenceRule | None:
    """Translate client settings into the canonical rule.

    Returns None when recurrence is switched off. Raises ``pydantic.ValidationError``
    for a dict that does not describe a valid rule.
    """
    if settings is None:
        return None
    if not isinstance(settings, RecurrenceSettings):
        settings = RecurrenceSettings.model_validate(settings)
    if settings.type == "none":
        return None

    if settings.unit is None:
        raise RecurrenceRuleError("unit is required for a recurring task")
    return RecurrenceRule(
        schedule=build_schedule(settings.unit, settings.interval, settings.days),
        anchor=settings.anchor,
        end_date=settings.end_date,
        end_count=settings.end_count,
        legacy_pattern=_legacy_alias(settings),
        copy_attachments=settings.copy_attachments,
        interval=settings.interval,
    )


__all__ = ["RecurrenceSettings", "parse_recurrence_settings"]
