"""Comments left on tasks by household members."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from familytodo.database import Base
from familytodo.services.time_manager import get_current_time


class TaskComment(Base):
    """A free text note on a task. The author is optional."""

    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    person_id = Column(Integer, ForeignKey("people.id", ondelete="SET NULL"), nullable=True)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    task = relationship("Task", back_populates="comments")
    person = relationship("Person", lazy="joined")

    @property
    def person_name(self) -> str | None:
        return self.person.name if self.person else None

    @property
    def person_photo(self) -> str | None:
        return self.person.photo_url if self.person else None

    @property
    def person_color(self) -> str | None:
        return self.person.color if self.person else None

    def __repr__(self) -> str:
        """String representation of TaskComment."""
        return f"<TaskComment(id={self.id}, task_id={self.task_id}, person_id={self.person_id})>"


__all__ = ["TaskComment"]
