"""Pydantic schemas for API requests and responses."""

from familytodo.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from familytodo.schemas.person import PersonCreate, PersonResponse, PersonUpdate
from familytodo.schemas.recurrence import RecurrenceSettings, parse_recurrence_settings
from familytodo.schemas.task import TaskCreate, TaskResponse, TaskUpdate

__all__ = [
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "PersonCreate",
    "PersonResponse",
    "PersonUpdate",
    "RecurrenceSettings",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "parse_recurrence_settings",
]
