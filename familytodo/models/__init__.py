"""Database models."""

from familytodo.models.attachment import TaskAttachment
from familytodo.models.category import Category
from familytodo.models.comment import TaskComment
from familytodo.models.person import Person
from familytodo.models.task import Task

__all__ = ["Category", "Person", "Task", "TaskAttachment", "TaskComment"]
