"""Category model for organizing tasks."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from familytodo.database import Base
from familytodo.services.time_manager import get_current_time

if TYPE_CHECKING:
    from familytodo.models.task import Task


class Category(Base):
    """Model for task categories."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(32), nullable=False)
    color = Column(String(16), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False, index=True)
    deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)

    tasks = relationship("Task", back_populates="category")

    def __repr__(self) -> str:
        """String representation of Category."""
        return f"<Category(id={self.id}, name='{self.name}')>"
