"""Service for comments on tasks."""

from typing import TYPE_CHECKING
import logging

from sqlalchemy.orm import Session

from familytodo.models.comment import TaskComment
from familytodo.models.person import Person
from familytodo.models.task import Task

if TYPE_CHECKING:
    from familytodo.schemas.comment import CommentCreate, CommentUpdate

logger = logging.getLogger("familytodo.comments")


class CommentService:
    """Business logic for task comments."""

    @staticmethod
    def _task_exists(db: Session, task_id: int) -> bool:
        return db.query(Task.id).filter(Task.id == task_id).first() is not None

    @staticmethod
    def get_comments(db: Session, task_id: int) -> list[TaskComment] | None:
        """Comments of a task, newest first. None when the task does not exist."""
        if not CommentService._task_exists(db, task_id):
            return None
        return (
            db.query(TaskComment)
            .filter(TaskComment.task_id == task_id)
            .order_by(TaskComment.created_at.desc(), TaskComment.id.desc())
            .all()
        )

    @staticmethod
    def get_comment(db: Session, comment_id: int) -> TaskComment | None:
        return db.query(TaskComment).filter(TaskComment.id == comment_id).first()

    @staticmethod
    def add_comment(db: Session, task_id: int, data: "CommentCreate") -> TaskComment | None:
        """Add a comment. Raises ValueError for an unknown or removed author."""
        if not CommentService._task_exists(db, task_id):
            return None
        if data.person_id is not None:
            author = (
                db.query(Person.id)
                .filter(Person.id == data.person_id, Person.deleted.is_(False))
                .first()
            )
            if not author:
                raise ValueError(f"Person not found: {data.person_id}")
        comment = TaskComment(task_id=task_id, person_id=data.person_id, comment=data.comment)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        logger.info("Comment added: task_id=%s comment_id=%s", task_id, comment.id)
        return comment

    @staticmethod
    def update_comment(db: Session, comment_id: int, data: "CommentUpdate") -> TaskComment | None:
        comment = CommentService.get_comment(db, comment_id)
        if not comment:
            return None
        comment.comment = data.comment
        db.commit()
        db.refresh(comment)
        logger.info("Comment updated: comment_id=%s", comment_id)
        return comment

    @staticmethod
    def delete_comment(db: Session, comment_id: int) -> int | None:
        """Delete a comment for good. Returns the id of its task, or None if missing."""
        comment = CommentService.get_comment(db, comment_id)
        if not comment:
            return None
        task_id = comment.task_id
        db.delete(comment)
        db.commit()
        logger.info("Comment deleted: task_id=%s comment_id=%s", task_id, comment_id)
        return task_id
