"""Attachment metadata for tasks. File bytes live outside the database."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from familytodo.database import Base
from familytodo.services.time_manager import get_current_time


class TaskAttachment(Base):
    """A file reference attached to a task."""

    __tablename__ = "task_attachments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=True)
    url = Column(String(512), nullable=False)
    type = Column(String(128), nullable=True)
    size = Column(BigInteger, nullable=True)
    uploaded_by = Column(Integer, ForeignKey("people.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime, default=get_current_time, nullable=False)

    task = relationship("Task", back_populates="attachments")

    def __repr__(self) -> str:
        """String representation of TaskAttachment."""
        return f"<TaskAttachment(id={self.id}, task_id={self.task_id}, filename='{self.filename}')>"
