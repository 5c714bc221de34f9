"""Association tables for task relations."""

from sqlalchemy import Column, DateTime, ForeignKey, Table

from familytodo.database import Base
from familytodo.services.time_manager import get_current_time

# Association table between tasks and people (many-to-many)
task_assignments = Table(
    "task_assignments",
    Base.metadata,
    Column("task_id", ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("person_id", ForeignKey("people.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("assigned_at", DateTime, default=get_current_time, nullable=False),
)

__all__ = ["task_assignments"]
