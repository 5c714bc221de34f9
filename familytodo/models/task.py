"""Task model, including the persisted recurrence rule and series bookkeeping."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from familytodo.database import Base
from familytodo.models.task_assignment import task_assignments
from familytodo.services.time_manager import get_current_time

if TYPE_CHECKING:
    from familytodo.models.attachment import TaskAttachment
    from familytodo.models.category import Category
    from familytodo.models.comment import TaskComment
    from familytodo.models.person import Person


class Task(Base):
    """Model for household tasks.

    The ``recurring_*`` columns hold the rule exactly as the client configured it
    and are interpreted by ``familytodo.recurrence.rule``. Unit and pattern are
    plain strings so that rows written by older clients still load.
    """

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    priority = Column(Integer, default=3, nullable=False, index=True)
    due_date = Column(DateTime, nullable=True, index=True)
    completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    # Recurrence rule
    recurring_pattern = Column(String(16), nullable=True)  # legacy: daily | weekly | monthly
    recurring_interval = Column(Integer, nullable=True)
    recurring_unit = Column(String(16), nullable=True)  # day | week | month | year | weekday
    recurring_days = Column(Text, nullable=True)  # JSON list of weekday names
    recurring_from = Column(String(16), nullable=True)  # due_date | completion
    recurring_end_date = Column(DateTime, nullable=True)
    recurring_end_count = Column(Integer, nullable=True)
    recurring_copy_attachments = Column(Boolean, default=False, nullable=False)

    # Series state
    recurring_occurrence = Column(Integer, default=1, nullable=False)
    recurring_group_id = Column(String(36), nullable=True, index=True)
    parent_task_id = Column(Integer, nullable=True, index=True)
    # Set once this row has handed its series on to a successor (or tried to)
    recurrence_finalized = Column(Boolean, default=False, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="tasks")
    assignees = relationship(
        "Person",
        secondary=task_assignments,
        back_populates="tasks",
        lazy="selectin",
    )
    attachments = relationship(
        "TaskAttachment",
        back_populates="task",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TaskAttachment.id",
    )
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TaskComment.id",
    )

    @property
    def is_recurring(self) -> bool:
        """True when the row carries either a modern unit or a legacy pattern."""
        return bool(self.recurring_unit or self.recurring_pattern)

    @property
    def attachment_count(self) -> int:
        return len(self.attachments)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def __repr__(self) -> str:
        """String representation of Task."""
        return (
            f"<Task(id={self.id}, title='{self.title}', unit={self.recurring_unit}, "
            f"occurrence={self.recurring_occurrence})>"
        )
