"""Pydantic schemas for tasks."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from familytodo.recurrence.rule import (
    LegacyPattern,
    RecurrenceRuleError,
    rule_from_task,
    series_state_from_task,
)
from familytodo.schemas.category import CategoryResponse
from familytodo.schemas.comment import CommentResponse
from familytodo.schemas.person import PersonSummary
from familytodo.schemas.recurrence import RecurrenceSettings
from familytodo.services.time_manager import as_utc, to_naive_utc
from familytodo.utils.format_utils import summarize

logger = logging.getLogger("familytodo.tasks")


class TaskBase(BaseModel):
    """Fields shared by create and response schemas."""

    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    description: str | None = Field(None, description="Free text description")
    category_id: int | None = Field(None, description="Category identifier")
    priority: int = Field(3, ge=1, le=3, description="1 = high, 3 = low")
    due_date: datetime | None = Field(None, description="Due date of this occurrence")

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Store offsets as UTC."""
        return to_naive_utc(value)


class TaskCreate(TaskBase):
    """Schema for creating a task."""

    recurring_settings: RecurrenceSettings | None = Field(
        None,
        description="Recurrence configuration; takes precedence over recurring_pattern",
    )
    recurring_pattern: LegacyPattern | None = Field(
        None,
        description="Legacy recurrence (daily, weekly, monthly)",
    )
    assigned_people: list[int] = Field(default_factory=list, description="Assignee ids")

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        """Reject whitespace-only titles."""
        if not value.strip():
            raise ValueError("Title is required")
        return value


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only fields that are sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    category_id: int | None = None
    priority: int | None = Field(None, ge=1, le=3)
    due_date: datetime | None = None
    recurring_settings: RecurrenceSettings | None = Field(
        None,
        description="Full recurrence configuration (replaces the current rule)",
    )
    recurring_pattern: LegacyPattern | None = None
    assigned_people: list[int] | None = Field(None, description="Replaces all assignees")

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Store offsets as UTC."""
        return to_naive_utc(value)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        """Reject whitespace-only titles."""
        if value is not None and not value.strip():
            raise ValueError("Title cannot be empty")
        return value


class AttachmentCreate(BaseModel):
    """Metadata of a file that has already been stored elsewhere."""

    filename: str = Field(..., min_length=1, max_length=255)
    original_name: str | None = Field(None, max_length=255)
    url: str = Field(..., min_length=1, max_length=512)
    type: str | None = Field(None, max_length=128)
    size: int | None = Field(None, ge=0)
    uploaded_by: int | None = None


class AttachmentResponse(AttachmentCreate):
    """Attachment returned from the API."""

    id: int
    task_id: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("uploaded_at")
    def serialize_utc(self, value: datetime) -> datetime:
        return as_utc(value)


class TaskResponse(TaskBase):
    """Full description of a task in API responses."""

    id: int
    completed: bool
    completed_at: datetime | None
    deleted: bool
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    recurring_pattern: str | None = None
    recurring_interval: int | None = None
    recurring_unit: str | None = None
    recurring_days: str | None = None
    recurring_from: str | None = None
    recurring_end_date: datetime | None = None
    recurring_end_count: int | None = None
    recurring_copy_attachments: bool = False
    recurring_occurrence: int = 1
    recurring_group_id: str | None = None
    parent_task_id: int | None = None

    category: CategoryResponse | None = None
    assigned_people: list[PersonSummary] = Field(
        default_factory=list,
        validation_alias=AliasChoices("assignees", "assigned_people"),
    )
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    attachment_count: int = 0
    comment_count: int = 0
    recurring_summary: str | None = Field(None, description="Human readable recurrence")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer(
        "due_date",
        "completed_at",
        "deleted_at",
        "created_at",
        "updated_at",
        "recurring_end_date",
    )
    def serialize_utc(self, value: datetime | None) -> datetime | None:
        """Timestamps leave the API as UTC."""
        return as_utc(value)

    @classmethod
    def model_validate(
        cls,
        obj: Any,
        /,
        *,
        strict: bool | None = None,
        from_attributes: bool | None = None,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> "TaskResponse":
        """Add recurring_summary when validating from an ORM task."""
        instance = super().model_validate(
            obj,
            strict=strict,
            from_attributes=from_attributes,
            context=context,
            **kwargs,
        )
        if hasattr(obj, "recurring_unit"):
            try:
                instance.recurring_summary = summarize(rule_from_task(obj), series_state_from_task(obj))
            except RecurrenceRuleError as exc:
                logger.warning("Task %s has an unreadable recurrence rule: %s", instance.id, exc)
        return instance


class TaskDetailResponse(TaskResponse):
    """Task with its comments, oldest first."""

    comments: list[CommentResponse] = Field(default_factory=list)


__all__ = [
    "AttachmentCreate",
    "AttachmentResponse",
    "TaskCreate",
    "TaskDetailResponse",
    "TaskResponse",
    "TaskUpdate",
]
