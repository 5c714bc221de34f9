"""Person model representing a household member tasks are assigned to."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from familytodo.database import Base
from familytodo.models.task_assignment import task_assignments
from familytodo.services.time_manager import get_current_time


class Person(Base):
    """Model for household members."""

    __tablename__ = "people"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    photo_url = Column(String(512), nullable=True)
    color = Column(String(16), nullable=True)
    deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    tasks = relationship(
        "Task",
        secondary=task_assignments,
        back_populates="assignees",
    )

    def __repr__(self) -> str:
        """String representation of Person."""
        return f"<Person(id={self.id}, name='{self.name}', deleted={self.deleted})>"


__all__ = ["Person"]
